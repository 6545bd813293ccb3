"""
Form question API endpoints
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from homequote.core.dependencies import get_db, require_admin
from homequote.schemas.base import SuccessResponse
from homequote.schemas.questions import (
    FormQuestionCreate,
    FormQuestionResponse,
    FormQuestionUpdate,
    StepValidationRequest,
    StepValidationResponse,
    VisibleQuestionsRequest,
    VisibleQuestionsResponse,
)
from homequote.services.question_service import QuestionService
from homequote.utils.exceptions import BadRequestError
from homequote.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/form-questions")


@router.get("", response_model=List[FormQuestionResponse], dependencies=[Depends(require_admin)])
async def list_questions(
    category_id: Optional[str] = Query(None, alias="categoryId"),
    db: Session = Depends(get_db)
):
    """Live questions of a category in display order"""
    if not category_id:
        raise BadRequestError("Category ID is required")
    try:
        return QuestionService(db).list_questions(category_id)
    except Exception as e:
        logger.error(f"[red]Error fetching questions:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch questions")


@router.post("", response_model=FormQuestionResponse, status_code=201, dependencies=[Depends(require_admin)])
async def create_question(body: FormQuestionCreate, db: Session = Depends(get_db)):
    """Create a question; a conditional rule must point at an earlier step"""
    try:
        return QuestionService(db).create_question(body)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[red]Error creating question:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to create question")


@router.post("/visible", response_model=VisibleQuestionsResponse)
async def visible_questions(body: VisibleQuestionsRequest, db: Session = Depends(get_db)):
    """Questions to show for the answers recorded so far"""
    try:
        return QuestionService(db).visible_questions(body.service_category_id, body.answers)
    except Exception as e:
        logger.error(f"[red]Error evaluating visible questions:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to evaluate questions")


@router.post("/validate-step", response_model=StepValidationResponse)
async def validate_step(body: StepValidationRequest, db: Session = Depends(get_db)):
    """Whether the answers complete a step, and which step comes next"""
    try:
        return QuestionService(db).validate_step(body.service_category_id, body.answers, body.step)
    except Exception as e:
        logger.error(f"[red]Error validating step {body.step}:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to validate step")


@router.get("/{question_id}", response_model=FormQuestionResponse, dependencies=[Depends(require_admin)])
async def get_question(question_id: str, db: Session = Depends(get_db)):
    return QuestionService(db).get_question(question_id)


@router.patch("/{question_id}", response_model=FormQuestionResponse, dependencies=[Depends(require_admin)])
async def update_question(question_id: str, body: FormQuestionUpdate, db: Session = Depends(get_db)):
    """Partial update; changes that would break a conditional rule are rejected"""
    try:
        return QuestionService(db).update_question(question_id, body)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[red]Error updating question {question_id}:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to update question")


@router.delete("/{question_id}", response_model=SuccessResponse, dependencies=[Depends(require_admin)])
async def delete_question(question_id: str, db: Session = Depends(get_db)):
    """Soft delete"""
    try:
        QuestionService(db).delete_question(question_id)
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[red]Error deleting question {question_id}:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to delete question")

"""
Form question request and response schemas
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, field_validator

from homequote.schemas.base import BaseSchema, TimestampSchema


class ConditionalDisplay(BaseSchema):
    """Shows a question only when an earlier question has a matching answer"""
    dependent_on_question_id: str
    show_when_answer_equals: List[str]
    logical_operator: Literal["AND", "OR"] = "OR"

    @field_validator("logical_operator", mode="before")
    @classmethod
    def upper_operator(cls, v):
        return v.upper() if isinstance(v, str) else v


class FormQuestionBase(BaseSchema):
    """Fields an admin authors for a question"""
    question_text: str
    step_number: int = Field(ge=1)
    display_order_in_step: int = 0
    is_multiple_choice: bool = False
    answer_options: Optional[List[str]] = None
    allow_multiple_selections: bool = False
    is_required: bool = True
    status: Literal["active", "inactive"] = "active"
    conditional_display: Optional[ConditionalDisplay] = None


class FormQuestionCreate(FormQuestionBase):
    """Request body for creating a question"""
    service_category_id: str


class FormQuestionUpdate(BaseSchema):
    """Partial update; omitted fields keep their stored values"""
    question_text: Optional[str] = None
    step_number: Optional[int] = Field(default=None, ge=1)
    display_order_in_step: Optional[int] = None
    is_multiple_choice: Optional[bool] = None
    answer_options: Optional[List[str]] = None
    allow_multiple_selections: Optional[bool] = None
    is_required: Optional[bool] = None
    status: Optional[Literal["active", "inactive"]] = None
    conditional_display: Optional[ConditionalDisplay] = None


class FormQuestionResponse(FormQuestionBase, TimestampSchema):
    """Question as stored"""
    question_id: str
    service_category_id: str
    is_deleted: bool = False
    # Stored rules are returned as-is, even when they no longer validate
    conditional_display: Optional[Dict[str, Any]] = None


class VisibleQuestionsRequest(BaseSchema):
    """Answers recorded so far for a category's form"""
    service_category_id: str = Field(alias="serviceCategoryId")
    answers: Dict[str, Any] = {}


class VisibleQuestionsResponse(BaseSchema):
    """Visible questions in display order and the steps that contain them"""
    steps: List[int]
    questions: List[FormQuestionResponse]


class StepValidationRequest(VisibleQuestionsRequest):
    """Answers submitted for one step"""
    step: int = Field(ge=1)


class AnswerError(BaseSchema):
    """A problem with the answer to one question"""
    question_id: str
    message: str


class StepValidationResponse(BaseSchema):
    """Whether the customer may advance past `step`"""
    step: int
    complete: bool
    missing: List[str]
    errors: List[AnswerError]
    next_step: Optional[int] = None

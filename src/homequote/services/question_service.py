"""
Question bank authoring and customer-facing form evaluation
"""
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.orm import Session

from homequote.database.models import FormQuestion
from homequote.repositories.catalog_repository import ServiceCategoryRepository
from homequote.repositories.question_repository import QuestionRepository
from homequote.schemas.questions import (
    ConditionalDisplay,
    FormQuestionCreate,
    FormQuestionUpdate,
    StepValidationResponse,
)
from homequote.services import form_engine
from homequote.utils.exceptions import BadRequestError, ConditionalDisplayError, NotFoundError
from homequote.utils.logging import get_logger

logger = get_logger(__name__)


class QuestionService:
    """Service for the form_questions bank"""

    def __init__(self, db: Session):
        self.db = db
        self.questions = QuestionRepository(db)
        self.categories = ServiceCategoryRepository(db)

    def list_questions(self, service_category_id: str) -> List[FormQuestion]:
        return self.questions.find_for_category(service_category_id)

    def get_question(self, question_id: str) -> FormQuestion:
        question = self.questions.find_live_by_id(question_id)
        if question is None:
            raise NotFoundError("Question not found")
        return question

    @staticmethod
    def _check_options(is_multiple_choice: bool, answer_options: Optional[List[str]]) -> Optional[List[str]]:
        if not is_multiple_choice:
            return None
        options = [o.strip() for o in (answer_options or []) if o and o.strip()]
        if not options:
            raise BadRequestError("Multiple-choice questions need at least one answer option")
        if len(set(options)) != len(options):
            raise BadRequestError("Answer options must be unique")
        return options

    def _check_rule(
        self,
        service_category_id: str,
        step_number: int,
        rule: Optional[ConditionalDisplay],
        question_id: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        if rule is None:
            return None
        dependency = self.questions.find_by_id(rule.dependent_on_question_id)
        if dependency is not None and dependency.service_category_id != service_category_id:
            dependency = None
        try:
            form_engine.validate_conditional_display(step_number, rule, dependency, question_id=question_id)
        except ConditionalDisplayError as e:
            raise BadRequestError(str(e))
        return rule.model_dump()

    def _check_dependents(self, question: FormQuestion, step_number: int, options: Optional[List[str]]) -> None:
        """Dependents must stay on later steps and keep answerable trigger values"""
        siblings = self.questions.find_for_category(question.service_category_id)
        for dependent in form_engine.dependents_of(question.question_id, siblings):
            if dependent.step_number <= step_number:
                raise BadRequestError(
                    f"Question '{dependent.question_text}' in step {dependent.step_number} depends on this "
                    f"question, so it must stay before step {dependent.step_number}"
                )
            rule = form_engine.get_rule(dependent)
            if options and rule is not None:
                lost = [v for v in rule.show_when_answer_equals if v not in options]
                if lost:
                    raise BadRequestError(
                        f"Question '{dependent.question_text}' is shown for answer(s) no longer offered: "
                        f"{', '.join(lost)}"
                    )

    def create_question(self, data: FormQuestionCreate) -> FormQuestion:
        if self.categories.find_by_id(data.service_category_id) is None:
            raise NotFoundError("Service category not found")
        options = self._check_options(data.is_multiple_choice, data.answer_options)
        rule = self._check_rule(data.service_category_id, data.step_number, data.conditional_display)
        question = self.questions.create(
            service_category_id=data.service_category_id,
            question_text=data.question_text,
            step_number=data.step_number,
            display_order_in_step=data.display_order_in_step,
            is_multiple_choice=data.is_multiple_choice,
            answer_options=options,
            allow_multiple_selections=data.allow_multiple_selections if data.is_multiple_choice else False,
            is_required=data.is_required,
            status=data.status,
            conditional_display=rule,
        )
        logger.info(f"[green]Created question[/green] [cyan]{question.question_id}[/cyan] in step {question.step_number}")
        return question

    def update_question(self, question_id: str, data: FormQuestionUpdate) -> FormQuestion:
        question = self.get_question(question_id)
        changes = data.model_dump(exclude_unset=True)
        # Only the rule and the options may be cleared with an explicit null
        changes = {
            k: v for k, v in changes.items()
            if v is not None or k in ("conditional_display", "answer_options")
        }

        step_number = changes.get("step_number") or question.step_number
        is_multiple_choice = changes.get("is_multiple_choice", question.is_multiple_choice)
        if "answer_options" in changes or "is_multiple_choice" in changes:
            changes["answer_options"] = self._check_options(
                is_multiple_choice, changes.get("answer_options", question.answer_options)
            )
        if not is_multiple_choice:
            changes["allow_multiple_selections"] = False

        if "conditional_display" in changes:
            changes["conditional_display"] = self._check_rule(
                question.service_category_id, step_number, data.conditional_display, question_id=question.question_id
            )
        elif "step_number" in changes and question.conditional_display:
            rule = form_engine.get_rule(question)
            self._check_rule(question.service_category_id, step_number, rule, question_id=question.question_id)

        if "step_number" in changes or "answer_options" in changes:
            options = changes.get("answer_options", question.answer_options) if is_multiple_choice else None
            self._check_dependents(question, step_number, options)

        return self.questions.update(question, **changes)

    def delete_question(self, question_id: str) -> FormQuestion:
        """Soft delete; refused while live questions still depend on it"""
        question = self.get_question(question_id)
        siblings = self.questions.find_for_category(question.service_category_id)
        dependents = form_engine.dependents_of(question.question_id, siblings)
        if dependents:
            raise BadRequestError(
                "Question cannot be deleted while other questions depend on it: "
                + ", ".join(d.question_text for d in dependents)
            )
        logger.info(f"[yellow]Soft-deleting question[/yellow] [cyan]{question_id}[/cyan]")
        return self.questions.update(question, is_deleted=True)

    def visible_questions(self, service_category_id: str, answers: Mapping[str, Any]) -> Dict[str, Any]:
        questions = self.questions.find_for_category(service_category_id)
        visible = form_engine.visible_questions(questions, answers)
        return {
            "steps": sorted({q.step_number for q in visible}),
            "questions": visible,
        }

    def validate_step(self, service_category_id: str, answers: Mapping[str, Any], step: int) -> StepValidationResponse:
        questions = self.questions.find_for_category(service_category_id)
        missing = form_engine.missing_required(questions, answers, step)
        errors = form_engine.validate_answers(questions, answers, step=step)
        return StepValidationResponse(
            step=step,
            complete=not errors,
            missing=[q.question_id for q in missing],
            errors=errors,
            next_step=form_engine.next_step(questions, answers, step),
        )

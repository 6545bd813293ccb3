"""
Conditional form engine.

Pure functions over already-fetched questions (ORM rows or schemas with the
same attributes) and a mapping of question_id -> recorded answer. A
question with a conditional display rule is visible only when its
dependency is itself visible and has a matching answer; an unanswered
dependency hides the question. Dependencies point to strictly earlier
steps, so one pass in display order settles every question.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from homequote.schemas.questions import AnswerError, ConditionalDisplay
from homequote.utils.exceptions import ConditionalDisplayError


def display_key(question) -> tuple:
    return (question.step_number, question.display_order_in_step or 0)


def _answer_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def answer_values(answer: Any) -> List[str]:
    """Recorded answer as a list of non-blank strings (empty when unanswered)"""
    if answer is None:
        return []
    if isinstance(answer, (list, tuple, set)):
        items = answer
    else:
        items = [answer]
    values = []
    for item in items:
        if item is None:
            continue
        if isinstance(item, dict):
            if item:
                values.append(item)
            continue
        text = _answer_text(item)
        if text.strip():
            values.append(text)
    return values


def is_answered(answer: Any) -> bool:
    return bool(answer_values(answer))


def get_rule(question) -> Optional[ConditionalDisplay]:
    """The question's conditional display rule, or None when ungated"""
    rule = question.conditional_display
    if not rule:
        return None
    if isinstance(rule, ConditionalDisplay):
        return rule
    try:
        return ConditionalDisplay.model_validate(rule)
    except ValidationError:
        # A malformed stored rule cannot be satisfied
        return ConditionalDisplay(dependent_on_question_id="", show_when_answer_equals=[])


def rule_matches(rule: ConditionalDisplay, answer: Any) -> bool:
    """Evaluate a rule against the dependency's recorded answer"""
    values = answer_values(answer)
    if not values:
        return False
    expected = set(rule.show_when_answer_equals)
    if not isinstance(answer, (list, tuple, set)):
        return isinstance(values[0], str) and values[0] in expected
    recorded = {v for v in values if isinstance(v, str)}
    if rule.logical_operator == "AND":
        return expected.issubset(recorded)
    return bool(recorded & expected)


def is_live(question) -> bool:
    """Active and not soft-deleted"""
    return not question.is_deleted and question.status == "active"


def visible_questions(questions: Iterable, answers: Mapping[str, Any]) -> List:
    """
    Questions the customer should see, ordered by step then display order.

    Answers recorded for hidden questions are ignored, so a hidden branch
    never keeps its own dependents visible.
    """
    visible = []
    visible_ids = set()
    for question in sorted((q for q in questions if is_live(q)), key=display_key):
        rule = get_rule(question)
        if rule is not None:
            dependency_id = rule.dependent_on_question_id
            if dependency_id not in visible_ids:
                continue
            if not rule_matches(rule, answers.get(dependency_id)):
                continue
        visible.append(question)
        visible_ids.add(question.question_id)
    return visible


def visible_questions_for_step(questions: Iterable, answers: Mapping[str, Any], step: int) -> List:
    return [q for q in visible_questions(questions, answers) if q.step_number == step]


def active_steps(questions: Iterable, answers: Mapping[str, Any]) -> List[int]:
    """Step numbers that contain at least one visible question"""
    return sorted({q.step_number for q in visible_questions(questions, answers)})


def next_step(questions: Iterable, answers: Mapping[str, Any], current_step: int) -> Optional[int]:
    """First step after `current_step` with visible questions, or None at the end"""
    for step in active_steps(questions, answers):
        if step > current_step:
            return step
    return None


def missing_required(questions: Iterable, answers: Mapping[str, Any], step: int) -> List:
    """Visible required questions in `step` without a non-empty answer"""
    return [
        q for q in visible_questions_for_step(questions, answers, step)
        if q.is_required and not is_answered(answers.get(q.question_id))
    ]


def is_step_complete(questions: Iterable, answers: Mapping[str, Any], step: int) -> bool:
    return not missing_required(questions, answers, step)


def validate_answers(
    questions: Iterable,
    answers: Mapping[str, Any],
    step: Optional[int] = None,
) -> List[AnswerError]:
    """
    Check the answers to visible questions (optionally only in `step`).

    Reports required questions left unanswered, multiple-choice answers
    outside the question's options, and several answers to a
    single-selection question. Answers to hidden or unknown questions are
    not checked.
    """
    errors = []
    for question in visible_questions(questions, answers):
        if step is not None and question.step_number != step:
            continue
        answer = answers.get(question.question_id)
        values = answer_values(answer)
        if not values:
            if question.is_required:
                errors.append(AnswerError(question_id=question.question_id, message="An answer is required"))
            continue
        if not question.is_multiple_choice:
            continue
        if len(values) > 1 and not question.allow_multiple_selections:
            errors.append(AnswerError(question_id=question.question_id, message="Only one answer may be selected"))
        options = set(question.answer_options or [])
        invalid = [v for v in values if not isinstance(v, str) or v not in options]
        if invalid:
            errors.append(AnswerError(
                question_id=question.question_id,
                message=f"Invalid option(s): {', '.join(str(v) for v in invalid)}",
            ))
    return errors


def validate_conditional_display(
    step_number: int,
    rule: ConditionalDisplay,
    dependency,
    question_id: Optional[str] = None,
) -> None:
    """
    Authoring-time check for a rule placed on a question in `step_number`.

    Raises:
        ConditionalDisplayError: If the dependency is missing, deleted, on the
            same or a later step, or the rule's values cannot be answered
    """
    if dependency is None or dependency.is_deleted:
        raise ConditionalDisplayError("Dependent question not found")
    if question_id is not None and dependency.question_id == question_id:
        raise ConditionalDisplayError("A question cannot depend on itself")
    if dependency.step_number >= step_number:
        raise ConditionalDisplayError(
            f"A question in step {step_number} can only depend on a question in an earlier step "
            f"(dependency is in step {dependency.step_number})"
        )
    if not rule.show_when_answer_equals:
        raise ConditionalDisplayError("show_when_answer_equals must list at least one answer")
    if dependency.is_multiple_choice and dependency.answer_options:
        unknown = [v for v in rule.show_when_answer_equals if v not in dependency.answer_options]
        if unknown:
            raise ConditionalDisplayError(
                f"Answer(s) not offered by the dependent question: {', '.join(unknown)}"
            )


def dependents_of(question_id: str, questions: Sequence) -> List:
    """Live questions whose rule points at `question_id`"""
    result = []
    for q in questions:
        if q.is_deleted:
            continue
        rule = get_rule(q)
        if rule is not None and rule.dependent_on_question_id == question_id:
            result.append(q)
    return result


def answers_by_text(questions: Iterable, answers: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Label answers with their question text for storage"""
    texts = {q.question_id: q.question_text for q in questions}
    return [
        {
            "question_id": question_id,
            "question_text": texts.get(question_id, "Unknown Question"),
            "answer": answer,
        }
        for question_id, answer in answers.items()
    ]

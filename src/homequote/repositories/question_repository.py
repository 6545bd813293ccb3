"""
Form question queries
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from homequote.database.models import FormQuestion
from homequote.repositories.base_repository import BaseRepository


class QuestionRepository(BaseRepository[FormQuestion]):
    """Repository for the form_questions table"""

    def __init__(self, db: Session):
        super().__init__(db, FormQuestion)

    def find_for_category(self, service_category_id: str, include_deleted: bool = False) -> List[FormQuestion]:
        """Questions of a category in display order"""
        query = self.db.query(FormQuestion).filter(FormQuestion.service_category_id == service_category_id)
        if not include_deleted:
            query = query.filter(FormQuestion.is_deleted.is_(False))
        return query.order_by(FormQuestion.step_number, FormQuestion.display_order_in_step).all()

    def find_live_by_id(self, question_id: str) -> Optional[FormQuestion]:
        question = self.find_by_id(question_id)
        if question is None or question.is_deleted:
            return None
        return question

    def find_texts(self, question_ids: List[str]) -> List[FormQuestion]:
        """Questions for labelling stored answers, deleted ones included"""
        if not question_ids:
            return []
        return self.db.query(FormQuestion).filter(FormQuestion.question_id.in_(question_ids)).all()

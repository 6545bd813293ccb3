"""
Lead and CRM integration queries
"""
from typing import Optional

from sqlalchemy.orm import Session

from homequote.database.models import CRMIntegration, PartnerLead, QuoteSubmission
from homequote.repositories.base_repository import BaseRepository


class PartnerLeadRepository(BaseRepository[PartnerLead]):
    """Repository for the partner_leads table"""

    def __init__(self, db: Session):
        super().__init__(db, PartnerLead)


class QuoteSubmissionRepository(BaseRepository[QuoteSubmission]):
    """Repository for the quote_submissions table"""

    def __init__(self, db: Session):
        super().__init__(db, QuoteSubmission)


class CRMIntegrationRepository(BaseRepository[CRMIntegration]):
    """Repository for the crm_integrations table"""

    def __init__(self, db: Session):
        super().__init__(db, CRMIntegration)

    def find_active_for_partner(self, partner_id: str) -> Optional[CRMIntegration]:
        return (
            self.db.query(CRMIntegration)
            .filter(CRMIntegration.partner_id == partner_id)
            .filter(CRMIntegration.is_active.is_(True))
            .first()
        )

    def upsert(self, partner_id: str, **values) -> CRMIntegration:
        """Insert or replace the partner's integration (one row per partner)"""
        existing = self.find_one_by(partner_id=partner_id)
        if existing is None:
            return self.create(partner_id=partner_id, **values)
        return self.update(existing, **values)

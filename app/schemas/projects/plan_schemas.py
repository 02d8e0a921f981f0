from datetime import datetime
from typing import List, Optional

from app.models.enums.project_status import ProjectStatus
from app.schemas.common import CamelModel, Money

# =====================================================
# PLAN SEEDS (parsed from QUOTE_META)
# =====================================================

class PhaseSeed(CamelModel):
    key: str
    group: ProjectStatus = ProjectStatus.REQUIREMENTS
    title: str
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    order: int


class PaymentSeed(CamelModel):
    label: str
    amount: Money
    due_date: Optional[datetime] = None
    before_phase_key: Optional[str] = None


class QuoteMetadata(CamelModel):
    phases: List[PhaseSeed] = []
    payment_schedule: List[PaymentSeed] = []
    service_id: Optional[int] = None
    project_title: Optional[str] = None
    project_description: Optional[str] = None

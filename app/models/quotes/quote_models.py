from decimal import Decimal

from sqlalchemy import Column, Integer, String, Text, ForeignKey, Numeric, Enum, DateTime, Index, CheckConstraint
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, ArchiveMixin
from app.models.enums.quote_status import QuoteStatus


class Quote(Base, TimestampMixin, ArchiveMixin):
    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True)
    custom_request_id = Column(Integer, ForeignKey("custom_project_requests.id", ondelete="RESTRICT"), nullable=False, index=True)

    amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    currency = Column(String(3), nullable=False, default="USD")
    scope = Column(Text, nullable=True)
    status = Column(Enum(QuoteStatus), nullable=False, default=QuoteStatus.DRAFT, index=True)

    # sha256 hex of the emailed token; prefixed with "used:" once spent
    magic_token = Column(String(80), nullable=True, index=True)

    sent_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)

    custom_request = relationship("CustomProjectRequest", lazy="selectin")

    __table_args__ = (
        Index("ix_quote_status_expires", "status", "expires_at"),
        CheckConstraint("amount >= 0", name="ck_quote_amount_non_negative"),
    )

    def __repr__(self):
        return f"<Quote id={self.id} status={self.status}>"

from decimal import Decimal

from sqlalchemy import Column, Integer, ForeignKey, Enum, Numeric, Index
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.models.base.mixins import TimestampMixin
from app.models.enums.referral_status import ReferralStatus


class ReferralTracking(Base, TimestampMixin):
    __tablename__ = "referral_tracking"

    id = Column(Integer, primary_key=True)
    referrer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    referred_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True, index=True)

    status = Column(Enum(ReferralStatus), nullable=False, default=ReferralStatus.PENDING)
    commission_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    commission_rate = Column(Numeric(5, 4), nullable=False)

    referrer = relationship("User", foreign_keys=[referrer_id], lazy="noload")
    referred_user = relationship("User", foreign_keys=[referred_user_id], lazy="noload")

    __table_args__ = (
        Index("ix_referral_pair", "referrer_id", "referred_user_id"),
    )

    def __repr__(self):
        return f"<ReferralTracking id={self.id} referrer={self.referrer_id} order={self.order_id} status={self.status}>"

from decimal import Decimal

from sqlalchemy import Column, Integer, ForeignKey, Enum, Index, Numeric, CheckConstraint
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.models.base.mixins import TimestampMixin
from app.models.enums.order_status import OrderStatus


class Order(Base, TimestampMixin):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id", ondelete="RESTRICT"), nullable=False, index=True)

    total_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    status = Column(Enum(OrderStatus), nullable=False, default=OrderStatus.PENDING)

    user = relationship("User", lazy="selectin")
    service = relationship("Service", lazy="selectin")

    __table_args__ = (
        Index("ix_order_user_status", "user_id", "status"),
        CheckConstraint("total_amount >= 0", name="ck_order_total_non_negative"),
    )

    def __repr__(self):
        return (
            f"<Order id={self.id} "
            f"user_id={self.user_id} "
            f"status={self.status}>"
        )

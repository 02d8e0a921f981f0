from sqlalchemy import Column, Integer, String, Enum, ForeignKey
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import TimestampMixin
from app.models.enums.custom_request_status import CustomRequestStatus


class CustomProjectRequest(Base, TimestampMixin):
    """Intake record submitted through the custom-project form."""

    __tablename__ = "custom_project_requests"

    id = Column(Integer, primary_key=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    project_type = Column(String(100), nullable=True)
    budget_range = Column(String(100), nullable=True)
    timeline = Column(String(100), nullable=True)
    status = Column(Enum(CustomRequestStatus), nullable=False, default=CustomRequestStatus.NEW, index=True)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True, index=True)

    user = relationship("User", lazy="selectin")

    def __repr__(self):
        return f"<CustomProjectRequest id={self.id} email={self.email} status={self.status}>"

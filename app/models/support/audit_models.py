from sqlalchemy import Column, Integer, String, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import TimestampMixin


class AuditLog(Base, TimestampMixin):
    """Immutable audit trail. APPEND-ONLY. Never updated, never deleted.

    Besides the notification trail it carries quote plan metadata
    (``QUOTE_META``) and the token hashes of sent quotes (``QUOTE_SENT``).
    """

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True)
    actor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(String(64), nullable=False, index=True)
    target_type = Column(String(32), nullable=False)
    target_id = Column(Integer, nullable=True)
    data = Column(JSON, nullable=True)

    actor = relationship("User", lazy="noload")

    __table_args__ = (
        Index("ix_audit_target_action", "target_type", "target_id", "action"),
    )

    def __repr__(self):
        return f"<AuditLog id={self.id} action={self.action} target={self.target_type}:{self.target_id}>"

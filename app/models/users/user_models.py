from sqlalchemy import Column, Integer, String, Boolean, Numeric, Enum, ForeignKey, JSON, DateTime
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import TimestampMixin
from app.models.enums.user_role import UserRole


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    password_hash = Column(String, nullable=True)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.CLIENT)
    is_active = Column(Boolean, default=True, nullable=False)
    token_version = Column(Integer, nullable=False, default=0)

    referral_code = Column(String(64), unique=True, nullable=True, index=True)
    referral_commission_rate = Column(Numeric(5, 4), nullable=True)
    referred_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    referred_by = relationship("User", remote_side=[id], lazy="selectin")

    def __repr__(self):
        return f"<User id={self.id} email={self.email} role={self.role}>"


class MagicLoginToken(Base, TimestampMixin):
    """Single-use passwordless login credential. Only the sha256 hash is stored."""

    __tablename__ = "magic_login_tokens"

    id = Column(Integer, primary_key=True)
    token_hash = Column(String(64), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    target_type = Column(String(50), nullable=False)
    target_id = Column(Integer, nullable=True)
    meta = Column(JSON, nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", lazy="selectin")

    def __repr__(self):
        return f"<MagicLoginToken id={self.id} user_id={self.user_id} target={self.target_type}:{self.target_id}>"

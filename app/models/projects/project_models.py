from decimal import Decimal

from sqlalchemy import Column, Integer, String, Text, ForeignKey, Enum, Numeric, DateTime, Index, CheckConstraint
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.models.base.mixins import TimestampMixin
from app.models.enums.project_status import ProjectStatus
from app.models.enums.milestone_status import MilestoneStatus


class Project(Base, TimestampMixin):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(Enum(ProjectStatus), nullable=False, default=ProjectStatus.REQUIREMENTS)

    order = relationship("Order", lazy="selectin")
    phases = relationship(
        "ProjectPhase",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectPhase.order",
        lazy="selectin",
    )
    payments = relationship(
        "MilestonePayment",
        back_populates="project",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Project id={self.id} order_id={self.order_id} status={self.status}>"


class ProjectPhase(Base, TimestampMixin):
    __tablename__ = "project_phases"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    group = Column(Enum(ProjectStatus), nullable=False, default=ProjectStatus.REQUIREMENTS)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    due_date = Column(DateTime(timezone=True), nullable=True)
    order = Column(Integer, nullable=False, default=0)

    project = relationship("Project", back_populates="phases", lazy="selectin")

    __table_args__ = (
        Index("ix_project_phase_project_order", "project_id", "order"),
    )

    def __repr__(self):
        return f"<ProjectPhase id={self.id} group={self.group} order={self.order}>"


class MilestonePayment(Base, TimestampMixin):
    __tablename__ = "milestone_payments"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    label = Column(String(255), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    due_date = Column(DateTime(timezone=True), nullable=True)

    # must be paid before this phase starts; not enforced here
    gate_phase_id = Column(Integer, ForeignKey("project_phases.id", ondelete="SET NULL"), nullable=True, index=True)

    status = Column(Enum(MilestoneStatus), nullable=False, default=MilestoneStatus.PENDING)

    project = relationship("Project", back_populates="payments", lazy="selectin")
    gate_phase = relationship("ProjectPhase", lazy="selectin")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_milestone_amount_positive"),
    )

    def __repr__(self):
        return f"<MilestonePayment id={self.id} amount={self.amount} status={self.status}>"

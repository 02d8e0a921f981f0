from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums.milestone_status import MilestoneStatus
from app.models.projects.project_models import Project, ProjectPhase, MilestonePayment
from app.schemas.projects.plan_schemas import PhaseSeed, PaymentSeed


@dataclass
class ProvisionedPlan:
    phases: List[ProjectPhase] = field(default_factory=list)
    payments: List[MilestonePayment] = field(default_factory=list)
    phase_ids_by_key: Dict[str, int] = field(default_factory=dict)


async def provision_project_plan(
    db: AsyncSession,
    project: Project,
    phase_seeds: List[PhaseSeed],
    payment_seeds: List[PaymentSeed],
) -> ProvisionedPlan:
    """Create the phases and milestone payments of a freshly created project.

    Phases are written first so payments can reference them by seed key.
    The project's status becomes the group of its lowest-ordered phase.
    """
    plan = ProvisionedPlan()
    phase_due_by_key: Dict[str, Optional[datetime]] = {}

    if phase_seeds:
        plan.phases = [
            ProjectPhase(
                project_id=project.id,
                group=seed.group,
                title=seed.title,
                description=seed.description,
                due_date=seed.due_date,
                order=seed.order,
            )
            for seed in phase_seeds
        ]
        db.add_all(plan.phases)
        await db.flush()

        for seed, phase in zip(phase_seeds, plan.phases):
            plan.phase_ids_by_key[seed.key] = phase.id
            phase_due_by_key[seed.key] = seed.due_date

        first_phase = min(plan.phases, key=lambda phase: phase.order)
        project.status = first_phase.group

    if payment_seeds:
        plan.payments = [
            MilestonePayment(
                project_id=project.id,
                label=seed.label,
                amount=seed.amount,
                due_date=seed.due_date or phase_due_by_key.get(seed.before_phase_key),
                gate_phase_id=plan.phase_ids_by_key.get(seed.before_phase_key),
                status=MilestoneStatus.PENDING,
            )
            for seed in payment_seeds
        ]
        db.add_all(plan.payments)
        await db.flush()

    return plan

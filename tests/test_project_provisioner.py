from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import select

from app.models.catalog.service_models import Service
from app.models.enums.milestone_status import MilestoneStatus
from app.models.enums.project_status import ProjectStatus
from app.models.orders.order_models import Order
from app.models.projects.project_models import MilestonePayment, Project, ProjectPhase
from app.models.users.user_models import User
from app.schemas.projects.plan_schemas import PaymentSeed, PhaseSeed
from app.services.projects.project_provisioner import provision_project_plan
from app.utils.datetime_utils import ensure_utc


@pytest.fixture
async def project(db):
    user = User(email="owner@example.com")
    service = Service(slug="custom-project", name="Custom project")
    db.add_all([user, service])
    await db.flush()

    order = Order(user_id=user.id, service_id=service.id, total_amount=Decimal("1000.00"))
    db.add(order)
    await db.flush()

    project = Project(order_id=order.id, title="Website")
    db.add(project)
    await db.flush()
    return project


async def test_phase_order_is_preserved_and_sets_project_status(db, project):
    seeds = [
        PhaseSeed(key="c", group=ProjectStatus.QA, title="Third", order=2),
        PhaseSeed(key="a", group=ProjectStatus.DESIGN, title="First", order=0),
        PhaseSeed(key="b", group=ProjectStatus.DEV, title="Second", order=1),
    ]

    plan = await provision_project_plan(db, project, seeds, [])
    await db.commit()

    assert project.status == ProjectStatus.DESIGN
    assert set(plan.phase_ids_by_key) == {"a", "b", "c"}

    phases = (
        await db.execute(
            select(ProjectPhase)
            .where(ProjectPhase.project_id == project.id)
            .order_by(ProjectPhase.order)
        )
    ).scalars().all()
    assert [phase.title for phase in phases] == ["First", "Second", "Third"]


async def test_payment_inherits_gate_phase_due_date(db, project):
    due = datetime(2030, 5, 1, tzinfo=timezone.utc)
    phases = [
        PhaseSeed(key="kickoff", title="Kickoff", order=0),
        PhaseSeed(key="launch", group=ProjectStatus.DELIVERED, title="Launch", order=1, due_date=due),
    ]
    payments = [
        PaymentSeed(label="Launch payment", amount=Decimal("750.00"), before_phase_key="launch"),
        PaymentSeed(label="Ungated", amount=Decimal("50.00")),
    ]

    plan = await provision_project_plan(db, project, phases, payments)
    await db.commit()

    gated, ungated = plan.payments
    assert ensure_utc(gated.due_date) == due
    assert gated.gate_phase_id == plan.phase_ids_by_key["launch"]
    assert gated.status == MilestoneStatus.PENDING

    assert ungated.due_date is None
    assert ungated.gate_phase_id is None


async def test_explicit_payment_due_date_wins(db, project):
    phase_due = datetime(2030, 5, 1, tzinfo=timezone.utc)
    payment_due = datetime(2030, 4, 1, tzinfo=timezone.utc)

    plan = await provision_project_plan(
        db,
        project,
        [PhaseSeed(key="launch", title="Launch", order=0, due_date=phase_due)],
        [PaymentSeed(label="Early", amount=Decimal("10.00"), due_date=payment_due, before_phase_key="launch")],
    )

    assert ensure_utc(plan.payments[0].due_date) == payment_due


async def test_unknown_gate_key_leaves_payment_ungated(db, project):
    plan = await provision_project_plan(
        db,
        project,
        [],
        [PaymentSeed(label="Deposit", amount=Decimal("100.00"), before_phase_key="missing")],
    )
    await db.commit()

    assert plan.phases == []
    assert project.status == ProjectStatus.REQUIREMENTS

    count = len((await db.execute(select(MilestonePayment))).scalars().all())
    assert count == 1
    assert plan.payments[0].gate_phase_id is None

import os

os.environ["APP_ENV"] = "development"
os.environ["DB_TYPE"] = "sqlite"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_quotes.db"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["NEXTAUTH_URL"] = "https://agency.test"
os.environ["SMTP_HOST"] = ""

from datetime import timedelta
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from app.constants.audit_actions import AuditAction, AuditTarget
from app.core.db import AsyncSessionLocal, engine, reset_models
from app.core.security import create_access_token
from app.models.catalog.service_models import Service
from app.models.enums.quote_status import QuoteStatus
from app.models.enums.user_role import UserRole
from app.models.quotes.quote_models import Quote
from app.models.requests.custom_request_models import CustomProjectRequest
from app.models.support.audit_models import AuditLog
from app.models.users.user_models import User
from app.services.quotes import quote_accept_service
from app.services.quotes.token_resolver import hash_token
from app.utils.datetime_utils import utcnow
from main import app

TWO_PHASE_PLAN = {
    "phases": [
        {"key": "discovery", "group": "REQUIREMENTS", "title": "Discovery", "order": 0},
        {
            "key": "build",
            "group": "DEV",
            "title": "Build",
            "order": 1,
            "dueDate": "2030-03-01T00:00:00Z",
        },
    ],
    "paymentSchedule": [
        {"label": "Build milestone", "amount": 500, "beforePhaseKey": "build"},
    ],
}


@pytest.fixture
async def database():
    await reset_models()
    yield
    await engine.dispose()


@pytest.fixture
async def db(database):
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def client(database):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture(autouse=True)
def admin_notifications(monkeypatch):
    sent = []

    async def fake_send_admin_notification(subject, text, html=None):
        sent.append({"subject": subject, "text": text})
        return True

    monkeypatch.setattr(
        quote_accept_service,
        "send_admin_notification",
        fake_send_admin_notification,
    )
    return sent


@pytest.fixture
def make_user(db):
    async def _make_user(email="someone@example.com", role=UserRole.CLIENT, **fields):
        user = User(email=email, role=role, **fields)
        db.add(user)
        await db.commit()
        return user

    return _make_user


@pytest.fixture
def make_quote(db):
    """Seed a custom request with a quote, its plan metadata and a live token."""

    async def _make_quote(
        *,
        email="client@example.com",
        full_name="Ada Client",
        amount=Decimal("2000.00"),
        status=QuoteStatus.SENT,
        expires_in=timedelta(days=7),
        meta=None,
        token="plain-token-123",
        service_slug="custom-project",
    ):
        if service_slug and not await db.scalar(select(Service.id).where(Service.slug == service_slug)):
            db.add(Service(slug=service_slug, name="Custom project"))

        request = CustomProjectRequest(full_name=full_name, email=email, project_type="Website")
        db.add(request)
        await db.flush()

        quote = Quote(
            custom_request_id=request.id,
            amount=amount,
            currency="USD",
            scope="Marketing site",
            status=status,
            magic_token=hash_token(token) if token else None,
            expires_at=utcnow() + expires_in,
        )
        db.add(quote)
        await db.flush()

        db.add(
            AuditLog(
                action=AuditAction.QUOTE_META.value,
                target_type=AuditTarget.QUOTE.value,
                target_id=quote.id,
                data=TWO_PHASE_PLAN if meta is None else meta,
            )
        )
        await db.commit()
        return quote

    return _make_quote


@pytest.fixture
def auth_headers():
    def _auth_headers(user, quote_id=None):
        token = create_access_token(
            subject=user.email,
            token_version=user.token_version,
            quote_id=quote_id,
        )
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers

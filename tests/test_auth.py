from datetime import timedelta
from urllib.parse import parse_qs, urlparse

from sqlalchemy import select

from app.core.security import decode_access_token, hash_password
from app.models.enums.user_role import UserRole
from app.models.users.user_models import MagicLoginToken
from app.services.auth.magic_login_service import create_magic_login_token
from app.utils.datetime_utils import utcnow


# =====================================================
# MAGIC LOGIN
# =====================================================
async def test_order_magic_link_logs_the_client_in_once(client, make_quote):
    quote = await make_quote(token="accept-me")
    accepted = await client.post(f"/api/quotes/{quote.id}/accept", json={"token": "accept-me"})
    link = accepted.json()["magicLink"]
    token = parse_qs(urlparse(link).query)["token"][0]

    first = await client.post("/api/magic/login/validate", json={"token": token})

    assert first.status_code == 200
    body = first.json()
    assert body["email"] == "client@example.com"
    assert body["targetType"] == "PROJECT"
    assert body["targetId"] == accepted.json()["projectId"]
    assert body["meta"]["quoteId"] == quote.id
    assert body["hasPassword"] is False

    payload = decode_access_token(body["accessToken"])
    assert payload["sub"] == "client@example.com"
    assert payload["quote_id"] == quote.id

    second = await client.post(f"/api/magic/login/validate?token={token}")

    assert second.status_code == 400
    assert second.json()["error"] == "Token already used"


async def test_expired_magic_login_is_refused(client, db, make_user):
    user = await make_user(email="late@example.com")
    issued = await create_magic_login_token(db, user=user, target_type="PROJECT", target_id=1)
    record = await db.scalar(
        select(MagicLoginToken).where(MagicLoginToken.token_hash == issued.hashed)
    )
    record.expires_at = utcnow() - timedelta(minutes=1)
    await db.commit()

    response = await client.post("/api/magic/login/validate", json={"token": issued.token})

    assert response.status_code == 400
    assert response.json()["error"] == "Token expired"


async def test_magic_login_requires_a_known_token(client, database):
    missing = await client.post("/api/magic/login/validate")
    unknown = await client.post("/api/magic/login/validate", json={"token": "nope"})

    assert missing.status_code == 400
    assert missing.json()["field"] == "token"
    assert unknown.status_code == 400
    assert unknown.json()["error"] == "Invalid or expired token"


# =====================================================
# PASSWORD LOGIN
# =====================================================
async def test_password_login_issues_session(client, make_user):
    await make_user(
        email="admin@example.com",
        role=UserRole.ADMIN,
        password_hash=hash_password("correct horse"),
    )

    response = await client.post(
        "/api/auth/login",
        json={"email": "Admin@example.com", "password": "correct horse"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["role"] == "ADMIN"
    assert decode_access_token(body["access_token"])["sub"] == "admin@example.com"


async def test_passwordless_account_cannot_use_password_login(client, make_user):
    await make_user(email="client@example.com")

    response = await client.post(
        "/api/auth/login",
        json={"email": "client@example.com", "password": "anything"},
    )

    assert response.status_code == 401
    assert response.json()["error_code"] == "INVALID_CREDENTIALS"


async def test_inactive_session_is_blocked(client, make_quote, make_user, auth_headers):
    quote = await make_quote()
    admin = await make_user(email="admin@example.com", role=UserRole.ADMIN, is_active=False)

    response = await client.post(f"/api/quotes/{quote.id}/accept", headers=auth_headers(admin))

    assert response.status_code == 403
    assert response.json()["error_code"] == "USER_INACTIVE"


async def test_admin_bootstrap_script_creates_login(client, monkeypatch, database):
    from app.scripts.create_admin import create_admin

    monkeypatch.setenv("ADMIN_EMAIL", "Boss@Example.com")
    monkeypatch.setenv("ADMIN_PASSWORD", "s3cret-pass")

    await create_admin()

    response = await client.post(
        "/api/auth/login",
        json={"email": "boss@example.com", "password": "s3cret-pass"},
    )
    assert response.status_code == 200
    assert response.json()["role"] == "ADMIN"

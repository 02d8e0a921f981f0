from sqlalchemy.ext.asyncio import AsyncSession
from app.models.support.audit_models import AuditLog
from app.constants.audit_actions import AuditAction, AuditTarget


def build_audit_entry(
    *,
    actor_id: int | None,
    action: AuditAction,
    target_type: AuditTarget,
    target_id: int | None,
    data: dict | None = None,
) -> AuditLog:
    return AuditLog(
        actor_id=actor_id,
        action=action.value,
        target_type=target_type.value,
        target_id=target_id,
        data=data or {},
    )


async def emit_audit(
    db: AsyncSession,
    *,
    actor_id: int | None,
    action: AuditAction,
    target_type: AuditTarget,
    target_id: int | None,
    data: dict | None = None,
) -> AuditLog:
    entry = build_audit_entry(
        actor_id=actor_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        data=data,
    )
    db.add(entry)
    return entry

"""Quote plan metadata.

Plan details of a quote are not columns: they live in the ``data`` of the
most recent ``QUOTE_META`` audit row for the quote::

    {
        "phases": [{"key", "group", "title", "description", "dueDate", "order"}],
        "paymentSchedule": [{"label", "amount", "dueDate", "beforePhaseKey"}],
        "serviceId": ...,
        "projectTitle": ...,
        "projectDescription": ...
    }

The parsers below never raise; malformed entries are filtered out.
"""

from typing import Any, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.audit_actions import AuditAction, AuditTarget
from app.models.enums.project_status import ProjectStatus
from app.models.support.audit_models import AuditLog
from app.schemas.projects.plan_schemas import PhaseSeed, PaymentSeed, QuoteMetadata
from app.utils.datetime_utils import parse_datetime
from app.utils.decimal_utils import parse_positive_amount


def _as_text(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _as_string_field(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _as_group(value: Any) -> ProjectStatus:
    try:
        return ProjectStatus(value)
    except (ValueError, TypeError):
        return ProjectStatus.REQUIREMENTS


def _as_order(value: Any, fallback: int) -> int:
    if isinstance(value, bool):
        return fallback
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return fallback


def _as_service_id(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int) and value > 0:
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip()) or None
    return None


def parse_phases(raw: Any) -> List[PhaseSeed]:
    entries = raw.get("phases") if isinstance(raw, dict) else None
    if not isinstance(entries, list):
        return []

    seeds = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            continue
        seeds.append(
            PhaseSeed(
                key=_as_text(entry.get("key")) or f"phase-{index + 1}",
                group=_as_group(entry.get("group")),
                title=_as_text(entry.get("title")) or f"Phase {index + 1}",
                description=_as_text(entry.get("description")),
                due_date=parse_datetime(entry.get("dueDate")),
                order=_as_order(entry.get("order"), index),
            )
        )
    return seeds


def parse_payment_schedule(raw: Any) -> List[PaymentSeed]:
    entries = raw.get("paymentSchedule") if isinstance(raw, dict) else None
    if not isinstance(entries, list):
        return []

    seeds = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            continue
        # zero, negative and non-numeric amounts are dropped, never defaulted
        amount = parse_positive_amount(entry.get("amount"))
        if amount is None:
            continue
        seeds.append(
            PaymentSeed(
                label=_as_text(entry.get("label")) or f"Payment {index + 1}",
                amount=amount,
                due_date=parse_datetime(entry.get("dueDate")),
                before_phase_key=_as_text(entry.get("beforePhaseKey")),
            )
        )
    return seeds


def parse_quote_metadata(raw: Any) -> QuoteMetadata:
    if not isinstance(raw, dict):
        raw = {}

    return QuoteMetadata(
        phases=parse_phases(raw),
        payment_schedule=parse_payment_schedule(raw),
        service_id=_as_service_id(raw.get("serviceId")),
        project_title=_as_string_field(raw.get("projectTitle")),
        project_description=_as_string_field(raw.get("projectDescription")),
    )


async def load_raw_quote_metadata(db: AsyncSession, quote_id: int) -> dict:
    data = await db.scalar(
        select(AuditLog.data)
        .where(
            AuditLog.target_id == quote_id,
            AuditLog.target_type == AuditTarget.QUOTE.value,
            AuditLog.action == AuditAction.QUOTE_META.value,
        )
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(1)
    )
    return data if isinstance(data, dict) else {}


async def load_quote_metadata(db: AsyncSession, quote_id: int) -> QuoteMetadata:
    return parse_quote_metadata(await load_raw_quote_metadata(db, quote_id))

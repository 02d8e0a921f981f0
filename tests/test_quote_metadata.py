from datetime import datetime, timezone
from decimal import Decimal

from app.models.enums.project_status import ProjectStatus
from app.services.quotes.quote_metadata import (
    parse_payment_schedule,
    parse_phases,
    parse_quote_metadata,
)


def test_payment_schedule_drops_non_positive_amounts():
    seeds = parse_payment_schedule(
        {"paymentSchedule": [{"label": "Deposit", "amount": 0}, {"label": "Final", "amount": "500"}]}
    )

    assert len(seeds) == 1
    assert seeds[0].label == "Final"
    assert seeds[0].amount == Decimal("500.00")


def test_payment_schedule_drops_negative_and_non_numeric_amounts():
    seeds = parse_payment_schedule(
        {
            "paymentSchedule": [
                {"label": "Negative", "amount": -10},
                {"label": "Text", "amount": "abc"},
                {"label": "Missing"},
                {"label": "Bool", "amount": True},
                {"label": "Nan", "amount": "NaN"},
                {"amount": 250.5, "dueDate": "2030-01-01T00:00:00Z", "beforePhaseKey": "build"},
            ]
        }
    )

    assert len(seeds) == 1
    assert seeds[0].label == "Payment 6"
    assert seeds[0].amount == Decimal("250.50")
    assert seeds[0].due_date == datetime(2030, 1, 1, tzinfo=timezone.utc)
    assert seeds[0].before_phase_key == "build"


def test_payment_schedule_keeps_sub_cent_amounts():
    seeds = parse_payment_schedule(
        {"paymentSchedule": [{"label": "Tiny", "amount": 0.004}, {"label": "Tiny text", "amount": "0.004"}]}
    )

    assert [seed.label for seed in seeds] == ["Tiny", "Tiny text"]
    assert all(seed.amount == Decimal("0.004") for seed in seeds)


def test_phases_fill_defaults_and_skip_non_objects():
    seeds = parse_phases(
        {
            "phases": [
                "not a phase",
                {"group": "NOPE", "dueDate": "garbage"},
                {"key": "qa", "group": "QA", "title": "Testing", "order": 7},
            ]
        }
    )

    assert len(seeds) == 2

    first, second = seeds
    assert first.key == "phase-2"
    assert first.title == "Phase 2"
    assert first.group == ProjectStatus.REQUIREMENTS
    assert first.due_date is None
    assert first.order == 1

    assert second.key == "qa"
    assert second.group == ProjectStatus.QA
    assert second.title == "Testing"
    assert second.order == 7


def test_metadata_parser_tolerates_malformed_input():
    for raw in (None, [], "text", 42, {"phases": "x", "paymentSchedule": {"a": 1}}):
        meta = parse_quote_metadata(raw)
        assert meta.phases == []
        assert meta.payment_schedule == []
        assert meta.service_id is None
        assert meta.project_title is None


def test_metadata_overrides_only_when_well_typed():
    meta = parse_quote_metadata(
        {"serviceId": "12", "projectTitle": "  Shop rebuild ", "projectDescription": 99}
    )

    assert meta.service_id == 12
    assert meta.project_title == "Shop rebuild"
    assert meta.project_description is None

    assert parse_quote_metadata({"serviceId": True}).service_id is None
    assert parse_quote_metadata({"serviceId": -3}).service_id is None

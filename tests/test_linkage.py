"""
Tests for phone normalization and visitor linkage.
"""

from datetime import date, datetime, timezone

import pytest

from rentdesk.journey.linkage import (
    collect_tenant_phones,
    find_linked_visitors,
    match_pre_tenant_visits,
    normalize_phone,
)
from tests.factories import FakeSources, make_tenant


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("9876543210", "9876543210"),
        ("+91 98765 43210", "9876543210"),
        ("919876543210", "9876543210"),
        ("098765-43210", "9876543210"),
        ("(080) 2345 6789", "8023456789"),
        ("+1 (415) 555-0132", "4155550132"),
        ("12345", "12345"),
        ("", ""),
        ("no digits here", ""),
        (None, ""),
    ],
)
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["+91 98765 43210", "0919876543210", "919191919191", "00000000000", "x", "+44 20 7946 0958"],
)
def test_normalize_phone_is_idempotent(raw):
    once = normalize_phone(raw)
    assert normalize_phone(once) == once
    assert len(once) <= 10


def test_collect_tenant_phones_drops_empties():
    tenant = make_tenant(phone="+91 98765 43210", phone_numbers=["080-2345-6789", "n/a"])
    assert collect_tenant_phones(tenant) == {"9876543210", "8023456789"}


def visit(id, phone, day, **extra):
    record = {
        "id": id,
        "visitor_name": "Asha",
        "visitor_phone": phone,
        "check_in_date": day,
        "check_in_time": datetime(day.year, day.month, day.day, 17, 0, tzinfo=timezone.utc),
    }
    record.update(extra)
    return record


def test_pre_tenant_visit_matched_by_normalized_phone():
    tenant = make_tenant(phone="9876543210", check_in_date=date(2024, 1, 1))
    candidates = [
        visit(
            "v1",
            "+91 98765 43210",
            date(2023, 12, 20),
            tenant={"name": "Meera"},
            property={"name": "Sunrise PG"},
        ),
        visit("v2", "9000000000", date(2023, 12, 21)),
    ]

    matches = match_pre_tenant_visits(tenant, candidates)

    assert [m.visitor_id for m in matches] == ["v1"]
    match = matches[0]
    assert match.days_before_joining == 12
    assert match.visited_tenant_name == "Meera"
    assert match.property_name == "Sunrise PG"
    assert match.visit_date == "2023-12-20"


def test_pre_tenant_ignores_visits_on_or_after_check_in():
    tenant = make_tenant(check_in_date=date(2024, 1, 1))
    candidates = [visit("v1", "9876543210", date(2024, 1, 1))]
    assert match_pre_tenant_visits(tenant, candidates) == []


def test_pre_tenant_empty_without_check_in_or_phone():
    candidates = [visit("v1", "9876543210", date(2023, 12, 20))]

    assert match_pre_tenant_visits(make_tenant(check_in_date=None), candidates) == []
    assert match_pre_tenant_visits(make_tenant(phone=None, phone_numbers=[]), candidates) == []


@pytest.mark.asyncio
async def test_find_linked_visitors_skips_scan_without_phone():
    tenant = make_tenant(phone=None, phone_numbers=[])
    sources = FakeSources(
        tenant=tenant,
        records={"visitors": [visit("v9", "9123456780", date(2024, 4, 14), relation=None)]},
        pre_tenant=[visit("v1", "9876543210", date(2023, 12, 20))],
    )

    linkage = await find_linked_visitors(sources, tenant)

    assert "pre_tenant_visits" not in sources.calls
    assert linkage.pre_tenant == []
    assert [v.visitor_id for v in linkage.linked] == ["v9"]
    assert linkage.linked[0].relationship == "Not specified"
    assert linkage.linked[0].matched_by == "manual"


@pytest.mark.asyncio
async def test_find_linked_visitors_survives_failing_visitor_store():
    tenant = make_tenant()
    sources = FakeSources(
        tenant=tenant,
        failing=("visitors",),
        pre_tenant=[visit("v1", "98765 43210", date(2023, 12, 20))],
    )

    linkage = await find_linked_visitors(sources, tenant)

    assert linkage.linked == []
    assert [v.visitor_id for v in linkage.pre_tenant] == ["v1"]

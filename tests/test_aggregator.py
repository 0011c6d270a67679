"""
Tests for the Event Aggregator: merge, filter, sort and paging.
"""

import logging
from datetime import date, datetime, timezone

import pytest

from rentdesk.journey.aggregator import (
    count_events_by_category,
    fetch_journey_events,
    filter_events,
    sort_events,
)
from rentdesk.journey.enums import EventCategory
from rentdesk.journey.normalizers import normalize_records
from rentdesk.journey.sources import JourneySources
from tests.factories import FakeSources, make_tenant


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


RECORDS = {
    "tenant_stays": [
        {"id": "s1", "stay_number": 1, "join_date": date(2024, 1, 1), "status": "active",
         "created_at": utc(2024, 1, 1, 9)},
    ],
    "bills": [
        {"id": "b1", "bill_number": "B-1", "status": "paid", "total_amount": 8000, "balance_due": 0,
         "created_at": utc(2024, 2, 1, 8)},
        {"id": "b2", "bill_number": "B-2", "status": "pending", "total_amount": 8000, "balance_due": 8000,
         "created_at": utc(2024, 3, 1, 8)},
    ],
    "payments": [
        {"id": "p1", "amount": 8000, "payment_method": "upi", "created_at": utc(2024, 2, 3, 10)},
    ],
    "charges": [
        {"id": "c1", "amount": 8000, "late_fee_applied": 200, "created_at": utc(2024, 3, 1, 8)},
    ],
    "complaints": [
        {"id": "k1", "title": "Leaking tap", "status": "resolved",
         "created_at": utc(2024, 3, 10, 11), "resolved_at": utc(2024, 3, 12, 15)},
    ],
    "room_transfers": [
        {"id": "x1", "old_rent": 8000, "new_rent": 9000, "created_at": utc(2024, 4, 1, 10)},
    ],
    "exit_clearance": [],
    "refunds": [
        {"id": "r1", "amount": 500, "status": "completed", "processed_at": utc(2024, 4, 20, 10)},
    ],
    "visitors": [
        {"id": "v1", "visitor_name": "Ravi", "check_in_time": utc(2024, 4, 14, 18)},
    ],
    "meter_readings": [
        {"id": "m1", "units_consumed": 40, "amount": 320, "created_at": utc(2024, 4, 30, 23, 30)},
    ],
}


def assert_sorted(events):
    for newer, older in zip(events, events[1:]):
        assert newer.timestamp >= older.timestamp
        if newer.timestamp == older.timestamp:
            assert newer.id <= older.id


@pytest.mark.asyncio
async def test_merges_every_source_newest_first():
    sources = FakeSources(tenant=make_tenant(), records=RECORDS)

    page = await fetch_journey_events(sources, make_tenant(), limit=50)

    assert page.total == 11
    assert page.events[0].id == "meter_m1"
    assert page.events[-1].id == "stay_join_s1"
    assert_sorted(page.events)
    assert len({e.id for e in page.events}) == page.total


@pytest.mark.asyncio
@pytest.mark.parametrize("limit,offset", [(0, 0), (3, 0), (3, 9), (5, 11), (4, 20), (50, 2)])
async def test_paging(limit, offset):
    sources = FakeSources(tenant=make_tenant(), records=RECORDS)

    page = await fetch_journey_events(sources, make_tenant(), limit=limit, offset=offset)

    assert page.total == 11
    assert len(page.events) == min(limit, max(0, page.total - offset))


@pytest.mark.asyncio
async def test_failing_source_degrades_to_empty(caplog):
    sources = FakeSources(tenant=make_tenant(), records=RECORDS, failing=("complaints",))

    with caplog.at_level(logging.WARNING):
        page = await fetch_journey_events(sources, make_tenant(), limit=50)

    assert page.total == 9
    assert all(e.source_table != "complaints" for e in page.events)
    assert_sorted(page.events)
    assert "complaints failed for tenant tenant-1" in caplog.text
    failure = next(r for r in caplog.records if "complaints failed" in r.getMessage())
    assert failure.source == "complaints"
    assert failure.tenant_id == "tenant-1"


@pytest.mark.asyncio
async def test_meter_readings_need_a_room():
    tenant = make_tenant(room=None)
    sources = FakeSources(tenant=tenant, records=RECORDS)

    page = await fetch_journey_events(sources, tenant, limit=50)

    assert "meter_readings" not in sources.calls
    assert all(e.source_table != "meter_readings" for e in page.events)


@pytest.mark.asyncio
async def test_category_and_date_filters():
    sources = FakeSources(tenant=make_tenant(), records=RECORDS)

    page = await fetch_journey_events(
        sources,
        make_tenant(),
        categories=[EventCategory.FINANCIAL, EventCategory.COMPLAINT],
        date_from=date(2024, 3, 1),
        date_to=date(2024, 3, 12),
    )

    assert [e.id for e in page.events] == [
        "complaint_resolved_k1",
        "complaint_created_k1",
        "bill_b2",
        "charge_latefee_c1",
    ]
    assert page.total == 4


def test_date_to_includes_the_whole_day():
    events = normalize_records("meter_readings", RECORDS["meter_readings"])

    assert filter_events(events, date_to=date(2024, 4, 30)) == events
    assert filter_events(events, date_to=date(2024, 4, 29)) == []
    assert filter_events(events, date_from=date(2024, 5, 1)) == []


def test_equal_timestamps_break_ties_by_id():
    same_time = utc(2024, 2, 1, 8)
    events = normalize_records("bills", [
        {"id": "b9", "status": "paid", "created_at": same_time},
        {"id": "b10", "status": "paid", "created_at": same_time},
        {"id": "a1", "status": "paid", "created_at": utc(2024, 1, 1)},
    ])

    assert [e.id for e in sort_events(events)] == ["bill_b10", "bill_b9", "bill_a1"]


@pytest.mark.asyncio
async def test_repeat_calls_are_identical():
    sources = FakeSources(tenant=make_tenant(), records=RECORDS)

    first = await fetch_journey_events(sources, make_tenant(), limit=5, offset=2)
    second = await fetch_journey_events(sources, make_tenant(), limit=5, offset=2)

    assert first.model_dump_json() == second.model_dump_json()


@pytest.mark.asyncio
async def test_category_counts():
    sources = FakeSources(tenant=make_tenant(), records=RECORDS, failing=("visitors",))

    counts = await count_events_by_category(sources, "tenant-1")

    assert counts[EventCategory.ONBOARDING] == 1
    assert counts[EventCategory.FINANCIAL] == 4
    assert counts[EventCategory.ACCOMMODATION] == 1
    assert counts[EventCategory.COMPLAINT] == 1
    assert counts[EventCategory.EXIT] == 0
    assert counts[EventCategory.VISITOR] == 0
    assert counts[EventCategory.DOCUMENT] == 0


@pytest.mark.asyncio
async def test_timeline_from_database(session_factory, seeded):
    sources = JourneySources(session_factory)
    tenant = await sources.get_tenant(str(seeded["tenant_id"]), str(seeded["workspace_id"]))

    page = await fetch_journey_events(sources, tenant, limit=100)

    ids = {e.id for e in page.events}
    assert f"visitor_{seeded['family_visit_id']}" in ids
    # Untagged visits only surface through linkage
    assert f"visitor_{seeded['scouting_visit_id']}" not in ids
    types = [e.type for e in page.events]
    assert types.count("payment_received") == 3
    assert types.count("checkout_completed") == 1
    assert "rejoined" in types
    assert "late_fee_applied" in types
    assert_sorted(page.events)

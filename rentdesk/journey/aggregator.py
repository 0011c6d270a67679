"""
Event Aggregator.

Fans out to every source adapter, normalizes each batch on its own,
then merges, filters, sorts and pages the timeline.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from rentdesk.journey.enums import EventCategory
from rentdesk.journey.normalizers import NORMALIZERS, normalize_records
from rentdesk.journey.schemas import EventPage, JourneyEvent, TenantProfile
from rentdesk.journey.sources import JourneySources, gather_settled
from rentdesk.journey.utils import end_of_day_exclusive, start_of_day

logger = logging.getLogger(__name__)

# Which sources feed each category's counter
CATEGORY_COUNT_SOURCES: Dict[EventCategory, Sequence[str]] = {
    EventCategory.ONBOARDING: ("tenant_stays",),
    EventCategory.FINANCIAL: ("bills", "payments", "refunds"),
    EventCategory.ACCOMMODATION: ("room_transfers",),
    EventCategory.COMPLAINT: ("complaints",),
    EventCategory.EXIT: ("exit_clearance",),
    EventCategory.VISITOR: ("visitors",),
    EventCategory.DOCUMENT: (),
    EventCategory.COMMUNICATION: (),
    EventCategory.SYSTEM: (),
}


def merge_batches(batches: Mapping[str, Iterable[dict]]) -> List[JourneyEvent]:
    """Normalize every source batch and concatenate. Duplicate ids keep the first."""
    events: List[JourneyEvent] = []
    seen = set()
    for source, records in batches.items():
        for event in normalize_records(source, records):
            if event.id in seen:
                continue
            seen.add(event.id)
            events.append(event)
    return events


def filter_events(
    events: Iterable[JourneyEvent],
    categories: Optional[Iterable[EventCategory]] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[JourneyEvent]:
    """
    Category filter is an inclusive set. Dates bound whole UTC days:
    `date_from` from its first instant, `date_to` through its last
    (half-open at the next midnight).
    """
    result = list(events)
    if categories:
        wanted = {EventCategory(c) for c in categories}
        result = [e for e in result if e.category in wanted]
    if date_from is not None:
        lower = start_of_day(date_from)
        result = [e for e in result if e.timestamp >= lower]
    if date_to is not None:
        upper = end_of_day_exclusive(date_to)
        result = [e for e in result if e.timestamp < upper]
    return result


def sort_events(events: Iterable[JourneyEvent]) -> List[JourneyEvent]:
    """Newest first; equal timestamps ordered by id ascending."""
    ordered = sorted(events, key=lambda e: e.id)
    ordered.sort(key=lambda e: e.timestamp, reverse=True)
    return ordered


def paginate(events: Sequence[JourneyEvent], limit: int, offset: int) -> EventPage:
    return EventPage(events=list(events[offset:offset + limit]), total=len(events))


async def fetch_journey_events(
    sources: JourneySources,
    tenant: TenantProfile,
    limit: int = 50,
    offset: int = 0,
    categories: Optional[Iterable[EventCategory]] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    visitor_limit: int = 50,
    meter_reading_limit: int = 20,
) -> EventPage:
    """Merged, filtered timeline page for one tenant. `total` is counted before paging."""
    tenant_id = tenant.id
    batches = await gather_settled(
        {
            "tenant_stays": sources.fetch_stays(tenant_id),
            "bills": sources.fetch_bills(tenant_id),
            "payments": sources.fetch_payments(tenant_id),
            "charges": sources.fetch_charges(tenant_id),
            "complaints": sources.fetch_complaints(tenant_id),
            "room_transfers": sources.fetch_room_transfers(tenant_id),
            "exit_clearance": sources.fetch_exit_clearances(tenant_id),
            "refunds": sources.fetch_refunds(tenant_id),
            "visitors": sources.fetch_visitors(tenant_id, limit=visitor_limit),
            "meter_readings": sources.fetch_meter_readings(
                tenant.current_room_id(), limit=meter_reading_limit
            ),
        },
        tenant_id=tenant_id,
    )

    events = merge_batches({name: batches[name] for name in NORMALIZERS if name in batches})
    events = filter_events(events, categories, date_from, date_to)
    events = sort_events(events)

    logger.debug(f"Journey for tenant {tenant_id}: {len(events)} events after filtering")
    return paginate(events, limit, offset)


async def count_events_by_category(
    sources: JourneySources,
    tenant_id: str,
) -> Dict[EventCategory, int]:
    """Per-category record counts for filter UIs, without building events."""
    needed = {source for group in CATEGORY_COUNT_SOURCES.values() for source in group}
    counts = await gather_settled(
        {source: sources.count_records(source, tenant_id) for source in sorted(needed)},
        tenant_id=tenant_id,
        empty=int,
    )
    return {
        category: sum(counts[source] for source in group)
        for category, group in CATEGORY_COUNT_SOURCES.items()
    }

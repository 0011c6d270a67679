"""
Analytics Calculator - longitudinal counters over a tenant's history.

Stores counts only; any rate (on-time %, resolution %) is left for the
caller to derive so the two never drift apart.
"""

import logging
from datetime import date, datetime
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from rentdesk.journey.schemas import JourneyAnalytics, TenantProfile
from rentdesk.journey.sources import JourneySources, gather_settled
from rentdesk.journey.utils import (
    as_float,
    days_between,
    round_half_up,
    start_of_day,
    to_day,
    to_instant,
)

logger = logging.getLogger(__name__)

RESOLVED_COMPLAINT_STATUSES = frozenset({"resolved", "closed"})


def _days_since(day: Optional[date], now: datetime) -> int:
    if day is None:
        return 0
    return days_between(start_of_day(day), now)


def _payment_instant(payment: Mapping) -> Optional[datetime]:
    return to_instant(payment.get("payment_date") or payment.get("created_at"))


def classify_paid_bills(
    bills: Iterable[Mapping],
    payments: Iterable[Mapping],
) -> Tuple[int, int, int]:
    """
    Match every paid bill to the earliest payment dated on/after the bill.

    Returns (on_time, late, average_days_to_pay). A bill without a
    matching payment, or without a due date, is left out of all three.
    """
    dated_payments: List[Tuple[datetime, str]] = sorted(
        (instant, str(p.get("id")))
        for p in payments
        for instant in [_payment_instant(p)]
        if instant is not None
    )

    on_time = late = 0
    days_to_pay: List[int] = []
    for bill in bills:
        if bill.get("status") != "paid":
            continue
        billed_at = to_instant(bill.get("created_at") or bill.get("bill_date"))
        due_day = to_day(bill.get("due_date"))
        if billed_at is None or due_day is None:
            continue

        # Matched on calendar days, measured in whole elapsed days
        bill_day = billed_at.date()
        paid_at = next((p for p, _ in dated_payments if p.date() >= bill_day), None)
        if paid_at is None:
            continue

        if paid_at.date() <= due_day:
            on_time += 1
        else:
            late += 1
        days_to_pay.append(days_between(billed_at, paid_at))

    average = round_half_up(sum(days_to_pay) / len(days_to_pay)) if days_to_pay else 0
    return on_time, late, average


def calculate_analytics(
    tenant: TenantProfile,
    stays: Sequence[Mapping],
    bills: Sequence[Mapping],
    payments: Sequence[Mapping],
    complaints: Sequence[Mapping],
    transfers: Sequence[Mapping],
    visitors: Sequence[Mapping],
    now: datetime,
) -> JourneyAnalytics:
    """Pure computation over already-loaded records."""
    join_days = sorted(d for d in (to_day(s.get("join_date")) for s in stays) if d is not None)

    first_day = tenant.check_in_date or (join_days[0] if join_days else None)
    total_stay_days = _days_since(first_day, now)

    active = next((s for s in stays if s.get("status") == "active"), None)
    active_join = to_day(active.get("join_date")) if active else None
    current_stay_days = _days_since(active_join, now) if active_join else total_stay_days

    average_stay_duration = total_stay_days
    durations = []
    for stay in stays:
        start = to_day(stay.get("join_date"))
        if start is None:
            continue
        end = to_day(stay.get("exit_date"))
        durations.append(days_between(start_of_day(start), start_of_day(end) if end else now))
    if durations:
        average_stay_duration = round_half_up(sum(durations) / len(durations))

    on_time, late, average_days_to_pay = classify_paid_bills(bills, payments)

    return JourneyAnalytics(
        total_stay_days=total_stay_days,
        current_stay_days=current_stay_days,
        total_stays=len(stays) or 1,
        average_stay_duration=average_stay_duration,
        total_revenue=sum(as_float(p.get("amount")) for p in payments),
        total_payments=len(payments),
        total_bills_generated=len(bills),
        total_bills_paid=sum(1 for b in bills if b.get("status") == "paid"),
        bills_paid_on_time=on_time,
        bills_paid_late=late,
        average_days_to_pay=average_days_to_pay,
        total_complaints=len(complaints),
        complaints_resolved=sum(
            1 for c in complaints if c.get("status") in RESOLVED_COMPLAINT_STATUSES
        ),
        total_room_transfers=len(transfers),
        total_visitors=len(visitors),
        police_verification_status=tenant.police_verification_status or "pending",
        agreement_status="signed" if tenant.agreement_signed else "pending",
    )


async def load_analytics(
    sources: JourneySources,
    tenant: TenantProfile,
    now: datetime,
) -> JourneyAnalytics:
    tenant_id = tenant.id
    data = await gather_settled(
        {
            "tenant_stays": sources.fetch_stays(tenant_id),
            "bills": sources.fetch_bills(tenant_id),
            "payments": sources.fetch_payments(tenant_id),
            "complaints": sources.fetch_complaints(tenant_id),
            "room_transfers": sources.fetch_room_transfers(tenant_id),
            "visitors": sources.fetch_visitors(tenant_id, limit=None),
        },
        tenant_id=tenant_id,
    )
    return calculate_analytics(
        tenant,
        stays=data["tenant_stays"],
        bills=data["bills"],
        payments=data["payments"],
        complaints=data["complaints"],
        transfers=data["room_transfers"],
        visitors=data["visitors"],
        now=now,
    )

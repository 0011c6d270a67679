"""
Visitor Linkage Matcher.

Links visit records to a tenant: visits tagged to the tenant, and visits
logged before the tenant joined by someone with one of the tenant's phone
numbers (usually the tenant scouting the place).
"""

import logging
import re
from typing import Any, Iterable, List, Mapping, Set

from rentdesk.journey.schemas import LinkedVisitor, PreTenantVisit, TenantProfile, VisitorLinkage
from rentdesk.journey.sources import JourneySources, gather_settled
from rentdesk.journey.utils import days_between, start_of_day, to_day, to_instant

logger = logging.getLogger(__name__)

NON_DIGITS = re.compile(r"\D")


def normalize_phone(raw: Any) -> str:
    """
    Canonical 10-digit form of an Indian phone number.

    "+91 98765 43210", "098765 43210" and "9876543210" all map to
    "9876543210". Never raises; garbage gives "" or a best-effort tail.
    """
    if raw is None:
        return ""
    digits = NON_DIGITS.sub("", str(raw))
    if len(digits) == 12 and digits.startswith("91"):
        digits = digits[2:]
    elif len(digits) == 11 and digits.startswith("0"):
        digits = digits[1:]
    return digits[-10:]


def collect_tenant_phones(tenant: TenantProfile) -> Set[str]:
    """Primary and secondary numbers, normalized; empties dropped."""
    phones = set()
    for raw in [tenant.phone, *tenant.phone_numbers]:
        normalized = normalize_phone(raw)
        if normalized:
            phones.add(normalized)
    return phones


def _visit_date(visit: Mapping) -> Any:
    return visit.get("check_in_date") or visit.get("check_in_time")


def _as_text(value: Any):
    if value is None:
        return None
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


def build_linked_visitors(visits: Iterable[Mapping]) -> List[LinkedVisitor]:
    return [
        LinkedVisitor(
            visitor_id=str(v["id"]),
            visitor_name=v.get("visitor_name") or "Unknown",
            visit_date=_as_text(_visit_date(v)),
            relationship=v.get("relation") or "Not specified",
            matched_by="manual",
        )
        for v in visits
    ]


def match_pre_tenant_visits(
    tenant: TenantProfile,
    candidates: Iterable[Mapping],
) -> List[PreTenantVisit]:
    """Candidate visits before check-in whose phone matches the tenant."""
    phones = collect_tenant_phones(tenant)
    if tenant.check_in_date is None or not phones:
        return []

    joined = start_of_day(tenant.check_in_date)
    matches = []
    for visit in candidates:
        if normalize_phone(visit.get("visitor_phone")) not in phones:
            continue
        try:
            visited_on = to_instant(_visit_date(visit))
        except (TypeError, ValueError):
            visited_on = None
        if visited_on is None or to_day(visited_on) >= tenant.check_in_date:
            continue

        visited_tenant = visit.get("tenant") or {}
        visited_property = visit.get("property") or {}
        matches.append(
            PreTenantVisit(
                visitor_id=str(visit["id"]),
                visited_tenant_name=visited_tenant.get("name") or "Unknown",
                visit_date=_as_text(_visit_date(visit)),
                days_before_joining=days_between(visited_on, joined),
                property_name=visited_property.get("name"),
            )
        )
    return matches


async def find_linked_visitors(
    sources: JourneySources,
    tenant: TenantProfile,
    visitor_limit: int = 50,
    scan_limit: int = 100,
) -> VisitorLinkage:
    reads = {"linked": sources.fetch_visitors(tenant.id, limit=visitor_limit)}

    # Without a check-in date or a usable phone there is nothing to match on
    if tenant.check_in_date is not None and collect_tenant_phones(tenant):
        reads["pre_tenant"] = sources.fetch_pre_tenant_visits(
            tenant.workspace_id, before=tenant.check_in_date, limit=scan_limit
        )

    data = await gather_settled(reads, tenant_id=tenant.id)
    return VisitorLinkage(
        linked=build_linked_visitors(data["linked"]),
        pre_tenant=match_pre_tenant_visits(tenant, data.get("pre_tenant", [])),
    )

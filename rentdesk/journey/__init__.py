"""
Tenant journey aggregation.

Source adapters (journey.sources) -> normalizers -> aggregator, alongside
the analytics, financial and linkage calculators; the insight engine scores
their output. The package root only re-exports the pydantic-level types so
that rentdesk.config can import thresholds without touching the ORM.
"""

from rentdesk.journey.enums import AmountType, EventCategory, EventType, StatusColor
from rentdesk.journey.schemas import JourneyEvent, JourneyOptions, TenantJourneyData
from rentdesk.journey.thresholds import InsightThresholds

__all__ = [
    "AmountType",
    "EventCategory",
    "EventType",
    "StatusColor",
    "JourneyEvent",
    "JourneyOptions",
    "TenantJourneyData",
    "InsightThresholds",
]

"""
Journey Service - assembles a tenant's full journey.

Loads the tenant once, runs the timeline, analytics, financial summary
and visitor linkage concurrently, then scores insights from their
output. Never raises to its caller except on cancellation.
"""

import asyncio
import logging
from typing import Dict, Optional

from rentdesk.config import Settings, settings
from rentdesk.journey.aggregator import count_events_by_category, fetch_journey_events
from rentdesk.journey.analytics import load_analytics
from rentdesk.journey.enums import EventCategory
from rentdesk.journey.financial import load_financial_summary
from rentdesk.journey.insights import calculate_insights
from rentdesk.journey.linkage import find_linked_visitors
from rentdesk.journey.schemas import (
    FinancialSummary,
    JourneyAnalytics,
    JourneyOptions,
    PredictiveInsights,
    TenantJourneyData,
    VisitorLinkage,
)
from rentdesk.journey.sources import JourneySources
from rentdesk.journey.utils import utc_now
from rentdesk.services.result import ServiceResult

logger = logging.getLogger(__name__)


async def _value(value):
    return value


class JourneyService:
    """Read-side orchestrator over the journey components."""

    def __init__(self, sources: JourneySources, config: Optional[Settings] = None):
        self.sources = sources
        self.config = config or settings

    async def get_tenant_journey(self, options: JourneyOptions) -> ServiceResult[TenantJourneyData]:
        """
        Build the journey for `options.tenant_id`.

        Returns:
            ServiceResult with TenantJourneyData, NOT_FOUND when the tenant
            doesn't exist in the workspace, UNKNOWN_ERROR on anything else.
        """
        tenant_id = options.tenant_id
        try:
            now = utc_now()

            tenant = await self.sources.get_tenant(tenant_id, options.workspace_id)
            if tenant is None:
                logger.info(f"Journey requested for unknown tenant {tenant_id}")
                return ServiceResult.not_found("Tenant", tenant_id)

            # Insights are scored from analytics and financial
            need_analytics = options.include_analytics or options.include_insights
            need_financial = options.include_financial or options.include_insights

            page, analytics, financial, linkage = await asyncio.gather(
                fetch_journey_events(
                    self.sources,
                    tenant,
                    limit=options.events_limit,
                    offset=options.events_offset,
                    categories=options.event_categories,
                    date_from=options.date_from,
                    date_to=options.date_to,
                    visitor_limit=self.config.journey_visitor_limit,
                    meter_reading_limit=self.config.journey_meter_reading_limit,
                ),
                load_analytics(self.sources, tenant, now)
                if need_analytics else _value(JourneyAnalytics()),
                load_financial_summary(self.sources, tenant)
                if need_financial else _value(FinancialSummary()),
                find_linked_visitors(
                    self.sources,
                    tenant,
                    visitor_limit=self.config.journey_visitor_limit,
                    scan_limit=self.config.journey_pre_tenant_scan_limit,
                )
                if options.include_visitors else _value(VisitorLinkage()),
            )

            insights = PredictiveInsights()
            if options.include_insights:
                insights = calculate_insights(
                    tenant,
                    analytics,
                    financial,
                    thresholds=self.config.insight_thresholds,
                    now=now,
                )

            journey = TenantJourneyData(
                tenant_id=tenant.id,
                tenant_name=tenant.name,
                tenant_status=tenant.status,
                tenant_photo_url=tenant.photo_url,
                check_in_date=tenant.check_in_date,
                property=tenant.property,
                room=tenant.room,
                events=page.events,
                total_events=page.total,
                has_more_events=page.total > options.events_offset + options.events_limit,
                analytics=analytics if options.include_analytics else JourneyAnalytics(),
                financial=financial if options.include_financial else FinancialSummary(),
                insights=insights,
                linked_visitors=linkage.linked,
                pre_tenant_visits=linkage.pre_tenant,
                generated_at=utc_now(),
            )

            logger.info(
                f"Built journey for tenant {tenant_id}: "
                f"{len(page.events)}/{page.total} events",
                extra={"tenant_id": tenant_id},
            )
            return ServiceResult.success(journey)

        except Exception as e:
            logger.error(
                f"Failed to build journey for tenant {tenant_id}: {e}",
                exc_info=True,
                extra={"tenant_id": tenant_id},
            )
            return ServiceResult.from_exception(e, "build tenant journey", tenant_id=tenant_id)

    async def get_event_category_counts(
        self,
        tenant_id: str,
        workspace_id: Optional[str] = None,
    ) -> ServiceResult[Dict[EventCategory, int]]:
        """Per-category counts; scoped to the workspace when one is given."""
        try:
            if workspace_id is not None:
                tenant = await self.sources.get_tenant(tenant_id, workspace_id)
                if tenant is None:
                    logger.info(f"Category counts requested for unknown tenant {tenant_id}")
                    return ServiceResult.not_found("Tenant", tenant_id)

            counts = await count_events_by_category(self.sources, tenant_id)
            return ServiceResult.success(counts)

        except Exception as e:
            logger.error(
                f"Failed to count journey events for tenant {tenant_id}: {e}",
                exc_info=True,
                extra={"tenant_id": tenant_id},
            )
            return ServiceResult.from_exception(e, "count journey events", tenant_id=tenant_id)

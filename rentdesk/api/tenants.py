"""
Tenant Journey API Router.

Security:
- Read-only
- X-Api-Key required
- Every lookup scoped by X-Workspace-Id
"""

import asyncio
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status

from rentdesk.api.deps import get_journey_service, verify_api_key
from rentdesk.config import settings
from rentdesk.journey.enums import EventCategory
from rentdesk.journey.schemas import JourneyOptions, TenantJourneyData
from rentdesk.services.journey_service import JourneyService
from rentdesk.services.result import ErrorCode, ServiceResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tenants", tags=["Journey"], dependencies=[Depends(verify_api_key)])


def parse_categories(raw: Optional[str]) -> Optional[List[EventCategory]]:
    """'financial,complaint' -> [FINANCIAL, COMPLAINT]; 422 on unknown names."""
    if not raw:
        return None
    categories = []
    for name in raw.split(","):
        name = name.strip()
        if not name:
            continue
        try:
            categories.append(EventCategory(name))
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Unknown event category: {name}",
            )
    return categories or None


def raise_for_error(result: ServiceResult) -> None:
    if result.is_success:
        return
    code = (
        status.HTTP_404_NOT_FOUND
        if result.error.code == ErrorCode.NOT_FOUND
        else status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    raise HTTPException(status_code=code, detail=result.error.to_dict())


@router.get("/{tenant_id}/journey", response_model=TenantJourneyData)
async def get_tenant_journey(
    tenant_id: str,
    x_workspace_id: str = Header(..., alias="X-Workspace-Id"),
    limit: int = Query(50, ge=0),
    offset: int = Query(0, ge=0),
    categories: Optional[str] = Query(None, description="Comma separated event categories"),
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    analytics: bool = True,
    financial: bool = True,
    insights: bool = True,
    visitors: bool = True,
    service: JourneyService = Depends(get_journey_service),
) -> TenantJourneyData:
    """
    Full journey for one tenant.

    Returns the paginated timeline (newest first) with analytics,
    financial summary, predictive insights and linked visitors.
    """
    options = JourneyOptions(
        tenant_id=tenant_id,
        workspace_id=x_workspace_id,
        events_limit=min(limit, settings.journey_max_events_limit),
        events_offset=offset,
        event_categories=parse_categories(categories),
        date_from=date_from,
        date_to=date_to,
        include_analytics=analytics,
        include_financial=financial,
        include_insights=insights,
        include_visitors=visitors,
    )

    try:
        result = await asyncio.wait_for(
            service.get_tenant_journey(options),
            timeout=settings.journey_timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.warning(
            f"Journey for tenant {tenant_id} timed out after {settings.journey_timeout_seconds}s",
            extra={"tenant_id": tenant_id},
        )
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="Journey took too long to build",
        )

    raise_for_error(result)
    return result.data


@router.get("/{tenant_id}/journey/categories")
async def get_event_category_counts(
    tenant_id: str,
    x_workspace_id: str = Header(..., alias="X-Workspace-Id"),
    service: JourneyService = Depends(get_journey_service),
):
    """Per-category event counts for building timeline filters."""
    result = await service.get_event_category_counts(tenant_id, workspace_id=x_workspace_id)
    raise_for_error(result)
    return {
        "tenant_id": tenant_id,
        "counts": {category.value: count for category, count in result.data.items()},
    }

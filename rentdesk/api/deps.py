from typing import Optional

from fastapi import Header, HTTPException, status

from rentdesk.config import settings
from rentdesk.database import get_session_factory
from rentdesk.journey.sources import JourneySources
from rentdesk.services.journey_service import JourneyService


async def verify_api_key(
    x_api_key: Optional[str] = Header(None, alias="X-Api-Key"),
) -> str:
    """
    Validate the shared API key header.
    Returns the key if valid, raises 401 otherwise.
    """
    if not x_api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key",
        )
    
    if not settings.api_key or x_api_key != settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )
    
    return x_api_key


def get_journey_service() -> JourneyService:
    """Journey service over the configured record stores."""
    try:
        factory = get_session_factory()
    except RuntimeError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )
    return JourneyService(JourneySources(factory), settings)

"""Print a tenant's journey as JSON.

Usage: python scripts/print_journey.py <workspace_id> <tenant_id> [limit]
"""
import asyncio
import sys

from rentdesk.database import close_db, get_session_factory
from rentdesk.journey.schemas import JourneyOptions
from rentdesk.journey.sources import JourneySources
from rentdesk.logging_config import configure_logging
from rentdesk.services.journey_service import JourneyService


async def main(workspace_id: str, tenant_id: str, limit: int) -> int:
    configure_logging()
    service = JourneyService(JourneySources(get_session_factory()))
    
    try:
        result = await service.get_tenant_journey(
            JourneyOptions(tenant_id=tenant_id, workspace_id=workspace_id, events_limit=limit)
        )
    finally:
        await close_db()
    
    if not result.is_success:
        print(f"ERROR: {result.error.code.value} - {result.message}", file=sys.stderr)
        return 1
    
    print(result.data.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print(__doc__, file=sys.stderr)
        sys.exit(2)
    limit = int(sys.argv[3]) if len(sys.argv) > 3 else 50
    sys.exit(asyncio.run(main(sys.argv[1], sys.argv[2], limit)))

"""
Hand-built tenants and an in-memory source double for journey tests.
"""

from datetime import date
from typing import Dict, List, Optional

from rentdesk.journey.schemas import PropertySummary, RoomSummary, TenantProfile


def make_tenant(**overrides) -> TenantProfile:
    """Typed tenant identity for pure-function tests."""
    values = dict(
        id="tenant-1",
        workspace_id="ws-1",
        name="Asha Rao",
        status="active",
        phone="9876543210",
        check_in_date=date(2024, 1, 1),
        monthly_rent=8000.0,
        security_deposit=16000.0,
        security_deposit_paid=16000.0,
        agreement_signed=True,
        police_verification_status="verified",
        property=PropertySummary(id="prop-1", name="Sunrise PG"),
        room=RoomSummary(id="room-1", room_number="101"),
    )
    values.update(overrides)
    return TenantProfile(**values)


class FakeSources:
    """
    In-memory stand-in for JourneySources.
    `records` maps source name -> list of native records; any name listed
    in `failing` raises when read.
    """

    def __init__(
        self,
        tenant: Optional[TenantProfile] = None,
        records: Optional[Dict[str, List[dict]]] = None,
        failing: tuple = (),
        pre_tenant: Optional[List[dict]] = None,
        tenant_error: Optional[Exception] = None,
    ):
        self.tenant = tenant
        self.records = records or {}
        self.failing = set(failing)
        self.pre_tenant = pre_tenant or []
        self.tenant_error = tenant_error
        self.calls: List[str] = []

    async def _read(self, source: str) -> List[dict]:
        self.calls.append(source)
        if source in self.failing:
            raise ConnectionError(f"{source} store unavailable")
        return list(self.records.get(source, []))

    async def get_tenant(self, tenant_id, workspace_id):
        if self.tenant_error:
            raise self.tenant_error
        if self.tenant and self.tenant.id == tenant_id and self.tenant.workspace_id == workspace_id:
            return self.tenant
        return None

    async def fetch_stays(self, tenant_id):
        return await self._read("tenant_stays")

    async def fetch_bills(self, tenant_id):
        return await self._read("bills")

    async def fetch_payments(self, tenant_id):
        return await self._read("payments")

    async def fetch_charges(self, tenant_id):
        return await self._read("charges")

    async def fetch_complaints(self, tenant_id):
        return await self._read("complaints")

    async def fetch_room_transfers(self, tenant_id):
        return await self._read("room_transfers")

    async def fetch_exit_clearances(self, tenant_id):
        return await self._read("exit_clearance")

    async def fetch_refunds(self, tenant_id):
        return await self._read("refunds")

    async def fetch_visitors(self, tenant_id, limit=50):
        visits = await self._read("visitors")
        return visits if limit is None else visits[:limit]

    async def fetch_meter_readings(self, room_id, limit=20):
        if not room_id:
            return []
        return (await self._read("meter_readings"))[:limit]

    async def fetch_pre_tenant_visits(self, workspace_id, before, limit=100):
        self.calls.append("pre_tenant_visits")
        return self.pre_tenant[:limit]

    async def count_records(self, source, tenant_id):
        return len(await self._read(source))

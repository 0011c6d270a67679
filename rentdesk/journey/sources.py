"""
Source adapters - one read per record store.

Each adapter opens its own session so the fan-out can run every read
concurrently (an AsyncSession is not safe for concurrent use). Records
come back as plain dicts in the source's native shape: joined rows as
nested dicts, money as float, ids as str.
"""

import asyncio
import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.orm import selectinload

from rentdesk.journey.schemas import PropertySummary, RoomSummary, TenantProfile
from rentdesk.models import (
    Bill,
    Charge,
    Complaint,
    ExitClearance,
    MeterReading,
    Payment,
    Property,
    Refund,
    Room,
    RoomTransfer,
    Tenant,
    TenantStay,
    Visitor,
)

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

# Tenant-scoped tables, keyed by source name
TENANT_SCOPED_MODELS = {
    "tenant_stays": TenantStay,
    "bills": Bill,
    "payments": Payment,
    "charges": Charge,
    "complaints": Complaint,
    "room_transfers": RoomTransfer,
    "exit_clearance": ExitClearance,
    "refunds": Refund,
    "visitors": Visitor,
}


def parse_id(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


def _str_id(value: Optional[uuid.UUID]) -> Optional[str]:
    return str(value) if value is not None else None


def _money(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def _property(prop: Optional[Property]) -> Optional[Record]:
    if prop is None:
        return None
    return {"id": str(prop.id), "name": prop.name, "address": prop.address}


def _room(room: Optional[Room]) -> Optional[Record]:
    if room is None:
        return None
    return {"id": str(room.id), "room_number": room.room_number, "room_type": room.room_type}


def _charge_type(charge_type) -> Optional[Record]:
    if charge_type is None:
        return None
    return {"id": str(charge_type.id), "name": charge_type.name, "code": charge_type.code}


def _phone_numbers(raw: Any) -> List[str]:
    """Secondary numbers are stored as {"number": ..., "label": ...} or bare strings."""
    numbers = []
    for entry in raw or []:
        if isinstance(entry, Mapping):
            number = entry.get("number")
        else:
            number = entry
        if number:
            numbers.append(str(number))
    return numbers


def tenant_profile(tenant: Tenant) -> TenantProfile:
    """Build the typed identity from a Tenant row (property/room loaded)."""
    return TenantProfile(
        id=str(tenant.id),
        workspace_id=str(tenant.workspace_id),
        name=tenant.name,
        status=tenant.status,
        phone=tenant.phone,
        phone_numbers=_phone_numbers(tenant.phone_numbers),
        email=tenant.email,
        photo_url=tenant.photo_url,
        check_in_date=tenant.check_in_date,
        notice_date=tenant.notice_date,
        expected_exit_date=tenant.expected_exit_date,
        monthly_rent=_money(tenant.monthly_rent) or 0.0,
        security_deposit=_money(tenant.security_deposit) or 0.0,
        security_deposit_paid=_money(tenant.security_deposit_paid) or 0.0,
        advance_amount=_money(tenant.advance_amount) or 0.0,
        advance_balance=_money(tenant.advance_balance) or 0.0,
        agreement_signed=bool(tenant.agreement_signed),
        police_verification_status=tenant.police_verification_status or "pending",
        property=PropertySummary(**_property(tenant.property)) if tenant.property else None,
        room=RoomSummary(**_room(tenant.room)) if tenant.room else None,
    )


async def gather_settled(
    named: Mapping[str, Awaitable[Any]],
    tenant_id: Optional[str] = None,
    empty: Callable[[], Any] = list,
) -> Dict[str, Any]:
    """
    Run every read concurrently and collect what succeeded.

    A failed read is logged and contributes `empty()` (an empty list by
    default); cancellation is re-raised so a caller deadline still aborts the whole call.
    """
    names = list(named)
    results = await asyncio.gather(*named.values(), return_exceptions=True)

    settled: Dict[str, Any] = {}
    for name, result in zip(names, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.warning(
                f"Journey source {name} failed for tenant {tenant_id}: {result!r}",
                extra={"tenant_id": tenant_id, "source": name},
            )
            settled[name] = empty()
        else:
            settled[name] = result
    return settled


class JourneySources:
    """Read adapters over the record stores."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def _scalars(self, stmt) -> list:
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def get_tenant(self, tenant_id: str, workspace_id: str) -> Optional[TenantProfile]:
        """Tenant identity, scoped to the workspace. None if it doesn't resolve."""
        try:
            tenant_uuid = parse_id(tenant_id)
            workspace_uuid = parse_id(workspace_id)
        except ValueError:
            return None

        async with self.session_factory() as session:
            result = await session.execute(
                select(Tenant)
                .options(selectinload(Tenant.property), selectinload(Tenant.room))
                .where(Tenant.id == tenant_uuid, Tenant.workspace_id == workspace_uuid)
            )
            tenant = result.scalar_one_or_none()

        return tenant_profile(tenant) if tenant else None

    async def fetch_stays(self, tenant_id: str) -> List[Record]:
        rows = await self._scalars(
            select(TenantStay)
            .options(selectinload(TenantStay.property), selectinload(TenantStay.room))
            .where(TenantStay.tenant_id == parse_id(tenant_id))
            .order_by(TenantStay.stay_number)
        )
        return [
            {
                "id": str(s.id),
                "tenant_id": str(s.tenant_id),
                "stay_number": s.stay_number,
                "join_date": s.join_date,
                "exit_date": s.exit_date,
                "exit_reason": s.exit_reason,
                "status": s.status,
                "monthly_rent": _money(s.monthly_rent),
                "security_deposit": _money(s.security_deposit),
                "created_at": s.created_at,
                "property": _property(s.property),
                "room": _room(s.room),
            }
            for s in rows
        ]

    async def fetch_bills(self, tenant_id: str) -> List[Record]:
        rows = await self._scalars(
            select(Bill)
            .options(selectinload(Bill.property))
            .where(Bill.tenant_id == parse_id(tenant_id))
            .order_by(Bill.bill_date.desc())
        )
        return [
            {
                "id": str(b.id),
                "tenant_id": str(b.tenant_id),
                "bill_number": b.bill_number,
                "bill_date": b.bill_date,
                "due_date": b.due_date,
                "for_month": b.for_month,
                "total_amount": _money(b.total_amount),
                "paid_amount": _money(b.paid_amount),
                "balance_due": _money(b.balance_due),
                "status": b.status,
                "line_items": b.line_items,
                "created_at": b.created_at,
                "property": _property(b.property),
            }
            for b in rows
        ]

    async def fetch_payments(self, tenant_id: str) -> List[Record]:
        rows = await self._scalars(
            select(Payment)
            .options(selectinload(Payment.bill), selectinload(Payment.charge_type))
            .where(Payment.tenant_id == parse_id(tenant_id))
            .order_by(Payment.payment_date.desc())
        )
        return [
            {
                "id": str(p.id),
                "tenant_id": str(p.tenant_id),
                "amount": _money(p.amount),
                "payment_date": p.payment_date,
                "payment_method": p.payment_method,
                "reference_number": p.reference_number,
                "receipt_number": p.receipt_number,
                "for_period": p.for_period,
                "notes": p.notes,
                "created_at": p.created_at,
                "bill": {"id": str(p.bill.id), "bill_number": p.bill.bill_number} if p.bill else None,
                "charge_type": _charge_type(p.charge_type),
            }
            for p in rows
        ]

    async def fetch_charges(self, tenant_id: str) -> List[Record]:
        rows = await self._scalars(
            select(Charge)
            .options(selectinload(Charge.charge_type))
            .where(Charge.tenant_id == parse_id(tenant_id))
            .order_by(Charge.due_date.desc())
        )
        return [
            {
                "id": str(c.id),
                "tenant_id": str(c.tenant_id),
                "amount": _money(c.amount),
                "paid_amount": _money(c.paid_amount),
                "late_fee_applied": _money(c.late_fee_applied),
                "due_date": c.due_date,
                "for_period": c.for_period,
                "status": c.status,
                "created_at": c.created_at,
                "charge_type": _charge_type(c.charge_type),
            }
            for c in rows
        ]

    async def fetch_complaints(self, tenant_id: str) -> List[Record]:
        rows = await self._scalars(
            select(Complaint)
            .options(selectinload(Complaint.room))
            .where(Complaint.tenant_id == parse_id(tenant_id))
            .order_by(Complaint.created_at.desc())
        )
        return [
            {
                "id": str(c.id),
                "tenant_id": str(c.tenant_id),
                "title": c.title,
                "description": c.description,
                "category": c.category,
                "priority": c.priority,
                "status": c.status,
                "resolved_at": c.resolved_at,
                "resolution_notes": c.resolution_notes,
                "created_at": c.created_at,
                "room": _room(c.room),
            }
            for c in rows
        ]

    async def fetch_room_transfers(self, tenant_id: str) -> List[Record]:
        rows = await self._scalars(
            select(RoomTransfer)
            .options(
                selectinload(RoomTransfer.from_property),
                selectinload(RoomTransfer.from_room),
                selectinload(RoomTransfer.to_property),
                selectinload(RoomTransfer.to_room),
            )
            .where(RoomTransfer.tenant_id == parse_id(tenant_id))
            .order_by(RoomTransfer.transfer_date.desc())
        )
        return [
            {
                "id": str(t.id),
                "tenant_id": str(t.tenant_id),
                "transfer_date": t.transfer_date,
                "reason": t.reason,
                "old_rent": _money(t.old_rent),
                "new_rent": _money(t.new_rent),
                "created_at": t.created_at,
                "from_property": _property(t.from_property),
                "from_room": _room(t.from_room),
                "to_property": _property(t.to_property),
                "to_room": _room(t.to_room),
            }
            for t in rows
        ]

    async def fetch_exit_clearances(self, tenant_id: str) -> List[Record]:
        rows = await self._scalars(
            select(ExitClearance)
            .options(selectinload(ExitClearance.property), selectinload(ExitClearance.room))
            .where(ExitClearance.tenant_id == parse_id(tenant_id))
        )
        return [
            {
                "id": str(e.id),
                "tenant_id": str(e.tenant_id),
                "notice_given_date": e.notice_given_date,
                "expected_exit_date": e.expected_exit_date,
                "actual_exit_date": e.actual_exit_date,
                "total_dues": _money(e.total_dues),
                "total_refundable": _money(e.total_refundable),
                "final_amount": _money(e.final_amount),
                "deductions": e.deductions,
                "settlement_status": e.settlement_status,
                "room_inspection_done": e.room_inspection_done,
                "key_returned": e.key_returned,
                "created_at": e.created_at,
                "completed_at": e.completed_at,
                "property": _property(e.property),
                "room": _room(e.room),
            }
            for e in rows
        ]

    async def fetch_refunds(self, tenant_id: str) -> List[Record]:
        rows = await self._scalars(
            select(Refund)
            .where(Refund.tenant_id == parse_id(tenant_id))
            .order_by(Refund.created_at.desc())
        )
        return [
            {
                "id": str(r.id),
                "tenant_id": str(r.tenant_id),
                "refund_type": r.refund_type,
                "amount": _money(r.amount),
                "payment_mode": r.payment_mode,
                "status": r.status,
                "refund_date": r.refund_date,
                "reason": r.reason,
                "notes": r.notes,
                "processed_at": r.processed_at,
                "created_at": r.created_at,
            }
            for r in rows
        ]

    async def fetch_visitors(self, tenant_id: str, limit: Optional[int] = 50) -> List[Record]:
        """Visits tagged to this tenant, latest first. `limit=None` reads them all."""
        stmt = (
            select(Visitor)
            .where(Visitor.tenant_id == parse_id(tenant_id))
            .order_by(Visitor.check_in_time.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        rows = await self._scalars(stmt)
        return [_visitor_record(v) for v in rows]

    async def fetch_meter_readings(self, room_id: Optional[str], limit: int = 20) -> List[Record]:
        """Readings for the tenant's current room; nothing without a room."""
        if not room_id:
            return []
        rows = await self._scalars(
            select(MeterReading)
            .options(selectinload(MeterReading.charge_type))
            .where(MeterReading.room_id == parse_id(room_id))
            .order_by(MeterReading.reading_date.desc())
            .limit(limit)
        )
        return [
            {
                "id": str(m.id),
                "room_id": str(m.room_id),
                "reading_date": m.reading_date,
                "reading_value": _money(m.reading_value),
                "previous_reading": _money(m.previous_reading),
                "units_consumed": _money(m.units_consumed),
                "amount": _money(m.amount),
                "created_at": m.created_at,
                "charge_type": _charge_type(m.charge_type),
            }
            for m in rows
        ]

    async def fetch_pre_tenant_visits(
        self,
        workspace_id: str,
        before: date,
        limit: int = 100,
    ) -> List[Record]:
        """Workspace visits logged before `before` that carry a phone number."""
        rows = await self._scalars(
            select(Visitor)
            .options(selectinload(Visitor.tenant), selectinload(Visitor.property))
            .where(
                Visitor.workspace_id == parse_id(workspace_id),
                Visitor.check_in_date < before,
                Visitor.visitor_phone.is_not(None),
            )
            .order_by(Visitor.check_in_time.desc())
            .limit(limit)
        )
        records = []
        for v in rows:
            record = _visitor_record(v)
            record["tenant"] = {"id": str(v.tenant.id), "name": v.tenant.name} if v.tenant else None
            record["property"] = _property(v.property)
            records.append(record)
        return records

    async def count_records(self, source: str, tenant_id: str) -> int:
        model = TENANT_SCOPED_MODELS[source]
        async with self.session_factory() as session:
            result = await session.execute(
                select(func.count()).select_from(model).where(model.tenant_id == parse_id(tenant_id))
            )
            return int(result.scalar_one())


def _visitor_record(v: Visitor) -> Record:
    return {
        "id": str(v.id),
        "tenant_id": _str_id(v.tenant_id),
        "visitor_name": v.visitor_name,
        "visitor_phone": v.visitor_phone,
        "relation": v.relation,
        "purpose": v.purpose,
        "check_in_date": v.check_in_date,
        "check_in_time": v.check_in_time,
        "check_out_time": v.check_out_time,
        "is_overnight": v.is_overnight,
        "created_at": v.created_at,
    }

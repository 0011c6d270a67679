"""
Pytest configuration and fixtures.
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator, Dict

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from rentdesk.database import Base
from rentdesk.models import (
    Bill,
    ChargeType,
    Charge,
    Complaint,
    Payment,
    Property,
    Room,
    Tenant,
    TenantStay,
    Visitor,
)


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """
    File-backed SQLite so every concurrent source read gets its own
    connection (an in-memory database is per-connection).
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'journey.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def workspace_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest_asyncio.fixture(scope="function")
async def seeded(session_factory, workspace_id) -> Dict[str, uuid.UUID]:
    """
    One tenant with a realistic history:
    two stays (rejoined), three bills paid on time, one complaint
    resolved, one late fee, and a visit logged before check-in from
    the tenant's own phone.
    """
    ids = {"workspace_id": workspace_id}
    async with session_factory() as session:
        prop = Property(workspace_id=workspace_id, name="Sunrise PG", address="MG Road")
        session.add(prop)
        await session.flush()

        room = Room(workspace_id=workspace_id, property_id=prop.id, room_number="101")
        session.add(room)
        await session.flush()

        tenant = Tenant(
            workspace_id=workspace_id,
            name="Asha Rao",
            status="active",
            phone="9876543210",
            phone_numbers=[{"number": "080 2345 6789", "label": "work"}],
            check_in_date=date(2024, 1, 1),
            monthly_rent=Decimal("8000"),
            security_deposit=Decimal("16000"),
            security_deposit_paid=Decimal("16000"),
            agreement_signed=True,
            police_verification_status="verified",
            property_id=prop.id,
            room_id=room.id,
        )
        session.add(tenant)
        await session.flush()

        rent = ChargeType(workspace_id=workspace_id, name="Rent", code="rent")
        session.add(rent)
        await session.flush()

        session.add_all([
            TenantStay(
                workspace_id=workspace_id,
                tenant_id=tenant.id,
                property_id=prop.id,
                room_id=room.id,
                stay_number=1,
                join_date=date(2023, 1, 1),
                exit_date=date(2023, 6, 30),
                exit_reason="Relocated",
                status="completed",
                monthly_rent=Decimal("7500"),
                created_at=datetime(2023, 1, 1, 9, 0, tzinfo=timezone.utc),
            ),
            TenantStay(
                workspace_id=workspace_id,
                tenant_id=tenant.id,
                property_id=prop.id,
                room_id=room.id,
                stay_number=2,
                join_date=date(2024, 1, 1),
                status="active",
                monthly_rent=Decimal("8000"),
                created_at=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
            ),
        ])

        for month in (2, 3, 4):
            bill = Bill(
                workspace_id=workspace_id,
                tenant_id=tenant.id,
                property_id=prop.id,
                bill_number=f"B-2024-0{month}",
                bill_date=date(2024, month, 1),
                due_date=date(2024, month, 5),
                for_month=f"2024-0{month}",
                total_amount=Decimal("8000"),
                paid_amount=Decimal("8000"),
                balance_due=Decimal("0"),
                status="paid",
                created_at=datetime(2024, month, 1, 8, 0, tzinfo=timezone.utc),
            )
            session.add(bill)
            await session.flush()
            session.add(
                Payment(
                    workspace_id=workspace_id,
                    tenant_id=tenant.id,
                    bill_id=bill.id,
                    charge_type_id=rent.id,
                    amount=Decimal("8000"),
                    payment_date=date(2024, month, 3),
                    payment_method="upi",
                    receipt_number=f"R-{month}",
                    created_at=datetime(2024, month, 3, 10, 0, tzinfo=timezone.utc),
                )
            )

        session.add(
            Charge(
                workspace_id=workspace_id,
                tenant_id=tenant.id,
                charge_type_id=rent.id,
                amount=Decimal("8000"),
                paid_amount=Decimal("8000"),
                late_fee_applied=Decimal("150"),
                due_date=date(2024, 2, 5),
                status="paid",
                created_at=datetime(2024, 2, 1, 8, 0, tzinfo=timezone.utc),
            )
        )
        session.add(
            Complaint(
                workspace_id=workspace_id,
                tenant_id=tenant.id,
                room_id=room.id,
                title="Leaking tap",
                category="plumbing",
                priority="low",
                status="resolved",
                resolved_at=datetime(2024, 3, 12, 15, 0, tzinfo=timezone.utc),
                resolution_notes="Washer replaced",
                created_at=datetime(2024, 3, 10, 11, 0, tzinfo=timezone.utc),
            )
        )

        # The tenant came to look at the place before joining
        scouting = Visitor(
            workspace_id=workspace_id,
            property_id=prop.id,
            visitor_name="Asha",
            visitor_phone="+91 98765 43210",
            relation="Friend",
            purpose="Room viewing",
            check_in_date=date(2023, 12, 20),
            check_in_time=datetime(2023, 12, 20, 17, 0, tzinfo=timezone.utc),
            created_at=datetime(2023, 12, 20, 17, 0, tzinfo=timezone.utc),
        )
        family = Visitor(
            workspace_id=workspace_id,
            tenant_id=tenant.id,
            property_id=prop.id,
            visitor_name="Ravi Rao",
            visitor_phone="9123456780",
            relation="Brother",
            purpose="Family visit",
            check_in_date=date(2024, 4, 14),
            check_in_time=datetime(2024, 4, 14, 18, 0, tzinfo=timezone.utc),
            check_out_time=datetime(2024, 4, 14, 21, 0, tzinfo=timezone.utc),
            created_at=datetime(2024, 4, 14, 18, 0, tzinfo=timezone.utc),
        )
        session.add_all([scouting, family])
        await session.commit()

        ids.update(
            tenant_id=tenant.id,
            property_id=prop.id,
            room_id=room.id,
            scouting_visit_id=scouting.id,
            family_visit_id=family.id,
        )
    return ids

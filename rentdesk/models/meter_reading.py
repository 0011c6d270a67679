"""MeterReading model - utility readings taken per room."""

import uuid
from datetime import datetime, date
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, Date, ForeignKey, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentdesk.database import Base
from rentdesk.models.billing import ChargeType


class MeterReading(Base):
    """Meter reading for a room; scoped to the room, not the tenant."""
    
    __tablename__ = "meter_readings"
    
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    workspace_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    room_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("rooms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    charge_type_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("charge_types.id", ondelete="SET NULL"), nullable=True
    )
    
    reading_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    reading_value: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    previous_reading: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    units_consumed: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    
    charge_type: Mapped[Optional[ChargeType]] = relationship(lazy="raise")

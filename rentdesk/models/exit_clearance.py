"""ExitClearance model - notice, inspection and final settlement on exit."""

import uuid
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List, Any

from sqlalchemy import String, DateTime, Date, ForeignKey, Numeric, Boolean, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentdesk.database import Base
from rentdesk.models.property import Property, Room


class ExitClearance(Base):
    """
    Exit clearance for a leaving tenant.
    settlement_status moves from pending to cleared once dues are settled.
    """
    
    __tablename__ = "exit_clearance"
    
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    workspace_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    property_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("properties.id", ondelete="SET NULL"), nullable=True
    )
    room_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True
    )
    
    notice_given_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    expected_exit_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    actual_exit_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    
    # Settlement
    total_dues: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    total_refundable: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    final_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    deductions: Mapped[Optional[List[Any]]] = mapped_column(JSON, nullable=True)
    settlement_status: Mapped[str] = mapped_column(String(30), default="pending", nullable=False)
    
    # Checklist
    room_inspection_done: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    key_returned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    
    property: Mapped[Optional[Property]] = relationship(lazy="raise")
    room: Mapped[Optional[Room]] = relationship(lazy="raise")

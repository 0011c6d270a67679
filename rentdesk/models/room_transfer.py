"""RoomTransfer model - a tenant moving between rooms or properties."""

import uuid
from datetime import datetime, date
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, DateTime, Date, ForeignKey, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentdesk.database import Base
from rentdesk.models.property import Property, Room


class RoomTransfer(Base):
    """Move from one room to another, with the rent before and after."""
    
    __tablename__ = "room_transfers"
    
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    workspace_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    
    from_property_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("properties.id", ondelete="SET NULL"), nullable=True
    )
    from_room_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True
    )
    to_property_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("properties.id", ondelete="SET NULL"), nullable=True
    )
    to_room_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True
    )
    
    transfer_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    old_rent: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    new_rent: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    
    from_property: Mapped[Optional[Property]] = relationship(
        foreign_keys=[from_property_id], lazy="raise"
    )
    from_room: Mapped[Optional[Room]] = relationship(foreign_keys=[from_room_id], lazy="raise")
    to_property: Mapped[Optional[Property]] = relationship(
        foreign_keys=[to_property_id], lazy="raise"
    )
    to_room: Mapped[Optional[Room]] = relationship(foreign_keys=[to_room_id], lazy="raise")

"""Tenant model - identity, financial terms and compliance flags."""

import uuid
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List, Any

from sqlalchemy import String, DateTime, Date, ForeignKey, Numeric, Boolean, Integer, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentdesk.database import Base
from rentdesk.models.property import Property, Room


class Tenant(Base):
    """
    Tenant identity record.
    A tenant may have several stays (rejoining after an exit); the current
    property/room pointers describe the latest one.
    """
    
    __tablename__ = "tenants"
    
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    
    # Owning workspace (owner account)
    workspace_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    
    # active, notice_period, checked_out, ...
    status: Mapped[str] = mapped_column(String(30), default="active", nullable=False)
    
    # Primary phone plus any secondary numbers ([{"number": ..., "label": ...}])
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True, index=True)
    phone_numbers: Mapped[Optional[List[Any]]] = mapped_column(JSON, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    
    # Tenancy dates
    check_in_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    notice_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    expected_exit_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    
    # Financial terms
    monthly_rent: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    security_deposit: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    security_deposit_paid: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    advance_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    advance_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    
    # Compliance
    agreement_signed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    police_verification_status: Mapped[str] = mapped_column(
        String(30),
        default="pending",
        nullable=False,
    )
    
    # Current placement
    property_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="SET NULL"),
        nullable=True,
    )
    room_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("rooms.id", ondelete="SET NULL"),
        nullable=True,
    )
    
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=datetime.utcnow,
        nullable=False,
    )
    
    property: Mapped[Optional[Property]] = relationship(lazy="raise")
    room: Mapped[Optional[Room]] = relationship(lazy="raise")
    
    def __repr__(self) -> str:
        return f"<Tenant {self.name} {self.status}>"


class TenantStay(Base):
    """One continuous stay of a tenant (stay_number increments on rejoin)."""
    
    __tablename__ = "tenant_stays"
    
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
    
    stay_number: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    join_date: Mapped[date] = mapped_column(Date, nullable=False)
    exit_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    exit_reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    
    # active, completed
    status: Mapped[str] = mapped_column(String(30), default="active", nullable=False)
    
    monthly_rent: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    security_deposit: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    
    property: Mapped[Optional[Property]] = relationship(lazy="raise")
    room: Mapped[Optional[Room]] = relationship(lazy="raise")
    
    def __repr__(self) -> str:
        return f"<TenantStay {self.tenant_id} #{self.stay_number}>"

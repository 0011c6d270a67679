"""Billing models - charge types, bills, payments, charges and refunds."""

import uuid
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List, Any

from sqlalchemy import String, DateTime, Date, ForeignKey, Numeric, Text, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentdesk.database import Base
from rentdesk.models.property import Property


class ChargeType(Base):
    """Classification of a recurring charge (rent, electricity, water...)."""
    
    __tablename__ = "charge_types"
    
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    workspace_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    
    def __repr__(self) -> str:
        return f"<ChargeType {self.code}>"


class Bill(Base):
    """
    Monthly bill issued to a tenant.
    Status workflow is owned upstream: pending -> partial -> paid,
    or overdue / waived / cancelled.
    """
    
    __tablename__ = "bills"
    
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
    
    bill_number: Mapped[str] = mapped_column(String(50), nullable=False)
    bill_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    for_month: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    balance_due: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    
    status: Mapped[str] = mapped_column(String(30), default="pending", nullable=False)
    line_items: Mapped[Optional[List[Any]]] = mapped_column(JSON, nullable=True)
    
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    
    property: Mapped[Optional[Property]] = relationship(lazy="raise")
    
    def __repr__(self) -> str:
        return f"<Bill {self.bill_number} {self.status}>"


class Payment(Base):
    """Money received from a tenant, optionally against a bill."""
    
    __tablename__ = "payments"
    
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    workspace_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    bill_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("bills.id", ondelete="SET NULL"), nullable=True
    )
    charge_type_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("charge_types.id", ondelete="SET NULL"), nullable=True
    )
    
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    
    # cash, upi, bank_transfer, cheque, card, online
    payment_method: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    reference_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    receipt_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    for_period: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    
    bill: Mapped[Optional[Bill]] = relationship(lazy="raise")
    charge_type: Mapped[Optional[ChargeType]] = relationship(lazy="raise")
    
    def __repr__(self) -> str:
        return f"<Payment {self.amount} {self.payment_method}>"


class Charge(Base):
    """A typed charge line (rent, utility...) that may carry a late fee."""
    
    __tablename__ = "charges"
    
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    workspace_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    charge_type_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("charge_types.id", ondelete="SET NULL"), nullable=True
    )
    
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    late_fee_applied: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    for_period: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(String(30), default="pending", nullable=False)
    
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    
    charge_type: Mapped[Optional[ChargeType]] = relationship(lazy="raise")


class Refund(Base):
    """Money returned to a tenant (deposit, advance, overpayment)."""
    
    __tablename__ = "refunds"
    
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    workspace_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    
    # deposit_refund, advance_refund, overpayment, ...
    refund_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_mode: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    
    # pending, processing, completed, failed
    status: Mapped[str] = mapped_column(String(30), default="pending", nullable=False)
    
    refund_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    
    def __repr__(self) -> str:
        return f"<Refund {self.amount} {self.status}>"

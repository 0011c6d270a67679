"""Visitor model - gate log entries."""

import uuid
from datetime import datetime, date
from typing import Optional

from sqlalchemy import String, DateTime, Date, ForeignKey, Boolean, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentdesk.database import Base
from rentdesk.models.property import Property
from rentdesk.models.tenant import Tenant


class Visitor(Base):
    """
    A logged visit.
    tenant_id is the tenant being visited; the visitor themself is only
    known by name and phone, which is what journey linkage matches on.
    """
    
    __tablename__ = "visitors"
    
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    workspace_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    tenant_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("tenants.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    property_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("properties.id", ondelete="SET NULL"), nullable=True
    )
    
    visitor_name: Mapped[str] = mapped_column(String(200), nullable=False)
    visitor_phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    relation: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    purpose: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    
    check_in_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    check_in_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    check_out_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    is_overnight: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    
    tenant: Mapped[Optional[Tenant]] = relationship(lazy="raise")
    property: Mapped[Optional[Property]] = relationship(lazy="raise")
    
    def __repr__(self) -> str:
        return f"<Visitor {self.visitor_name}>"

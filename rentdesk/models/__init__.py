"""Models package for the record stores the journey reads."""

from rentdesk.models.property import Property, Room
from rentdesk.models.tenant import Tenant, TenantStay
from rentdesk.models.billing import ChargeType, Bill, Payment, Charge, Refund
from rentdesk.models.complaint import Complaint
from rentdesk.models.room_transfer import RoomTransfer
from rentdesk.models.exit_clearance import ExitClearance
from rentdesk.models.visitor import Visitor
from rentdesk.models.meter_reading import MeterReading

__all__ = [
    "Property",
    "Room",
    "Tenant",
    "TenantStay",
    "ChargeType",
    "Bill",
    "Payment",
    "Charge",
    "Refund",
    "Complaint",
    "RoomTransfer",
    "ExitClearance",
    "Visitor",
    "MeterReading",
]

"""
Event normalizers.

One pure function per record source, mapping a native record (a dict as
returned by the source adapters) to one or more JourneyEvents. A lifecycle
record (stay, complaint, exit clearance) yields one event per phase it has
reached. Missing optional fields fall back to placeholder labels; a record
that cannot be placed on the timeline at all raises, and
`normalize_records` skips it.
"""

import logging
from datetime import timedelta
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from rentdesk.journey.enums import AmountType, EventCategory, EventType, StatusColor
from rentdesk.journey.formatting import format_currency, format_date, payment_method_label
from rentdesk.journey.schemas import JourneyEvent, QuickAction
from rentdesk.journey.utils import as_float, start_of_day, to_day, to_instant

logger = logging.getLogger(__name__)

SourceRecord = Mapping[str, Any]
Normalizer = Callable[[SourceRecord], List[JourneyEvent]]

BILL_STATUS_COLORS = {
    "paid": StatusColor.SUCCESS,
    "pending": StatusColor.WARNING,
    "partial": StatusColor.WARNING,
    "overdue": StatusColor.ERROR,
    "waived": StatusColor.MUTED,
    "cancelled": StatusColor.MUTED,
}

COMPLAINT_STATUS_COLORS = {
    "open": StatusColor.ERROR,
    "acknowledged": StatusColor.WARNING,
    "in_progress": StatusColor.INFO,
    "resolved": StatusColor.SUCCESS,
    "closed": StatusColor.MUTED,
}

REFUND_STATUS_COLORS = {
    "completed": StatusColor.SUCCESS,
    "failed": StatusColor.ERROR,
    "pending": StatusColor.WARNING,
    "processing": StatusColor.WARNING,
}

REFUND_TITLES = {
    "completed": "Refund Processed",
    "pending": "Refund Pending",
}

STAY_TERMINAL_STATUSES = frozenset({"completed"})
COMPLAINT_RESOLVED_STATUS = "resolved"


def status_color(
    table: Mapping[str, StatusColor],
    status: Any,
    default: StatusColor = StatusColor.MUTED,
) -> StatusColor:
    """Lookup with an explicit default; unknown statuses are muted unless told otherwise."""
    return table.get(status, default) if isinstance(status, str) else default


def _first_instant(*values: Any):
    for value in values:
        instant = to_instant(value)
        if instant is not None:
            return instant
    raise ValueError("record has no usable timestamp")


def _field(entity: Any, key: str, placeholder: Optional[str] = None) -> Optional[str]:
    if isinstance(entity, Mapping) and entity.get(key):
        return str(entity[key])
    return placeholder


def _placement(record: SourceRecord) -> Dict[str, Any]:
    prop = record.get("property")
    room = record.get("room")
    return {
        "property_id": _field(prop, "id"),
        "property_name": _field(prop, "name"),
        "room_id": _field(room, "id"),
        "room_number": _field(room, "room_number"),
    }


def _optional_amount(value: Any) -> Optional[float]:
    return None if value is None else as_float(value)


# ---------------------------------------------------------------------------
# Per-source normalizers
# ---------------------------------------------------------------------------

def normalize_stay(stay: SourceRecord) -> List[JourneyEvent]:
    stay_id = str(stay["id"])
    stay_number = int(stay.get("stay_number") or 1)
    room_label = _field(stay.get("room"), "room_number", "Room")
    property_label = _field(stay.get("property"), "name", "Property")
    rejoined = stay_number > 1
    
    events = [
        JourneyEvent(
            id=f"stay_join_{stay_id}",
            timestamp=_first_instant(stay.get("created_at"), stay.get("join_date")),
            category=EventCategory.ONBOARDING,
            type=EventType.REJOINED.value if rejoined else EventType.CHECK_IN.value,
            title=f"Rejoined (Stay #{stay_number})" if rejoined else "Checked In",
            description=(
                f"{room_label} at {property_label} • "
                f"Rent: {format_currency(stay.get('monthly_rent'))}"
            ),
            source_table="tenant_stays",
            source_id=stay_id,
            amount=_optional_amount(stay.get("monthly_rent")),
            amount_type=AmountType.NEUTRAL,
            status=stay.get("status"),
            status_color=StatusColor.SUCCESS if stay.get("status") == "active" else StatusColor.MUTED,
            related_entities={**_placement(stay), "stay_id": stay_id},
            metadata={
                "stay_number": stay_number,
                "security_deposit": _optional_amount(stay.get("security_deposit")),
            },
            icon="UserPlus",
            action_url=f"/tenants/{stay.get('tenant_id')}",
        )
    ]
    
    exit_day = to_day(stay.get("exit_date"))
    if exit_day is not None and stay.get("status") in STAY_TERMINAL_STATUSES:
        events.append(
            JourneyEvent(
                id=f"stay_exit_{stay_id}",
                timestamp=start_of_day(exit_day) + timedelta(hours=23, minutes=59, seconds=59),
                category=EventCategory.EXIT,
                type=EventType.CHECKOUT_COMPLETED.value,
                title="Checked Out",
                description=(
                    f"Exit from {room_label} • "
                    f"Reason: {stay.get('exit_reason') or 'Not specified'}"
                ),
                source_table="tenant_stays",
                source_id=stay_id,
                status="completed",
                status_color=StatusColor.MUTED,
                related_entities=_placement(stay),
                metadata={"exit_reason": stay.get("exit_reason")},
                icon="LogOut",
            )
        )
    return events


def normalize_bill(bill: SourceRecord) -> List[JourneyEvent]:
    bill_id = str(bill["id"])
    bill_number = bill.get("bill_number") or "Bill"
    balance_due = as_float(bill.get("balance_due"))
    status = bill.get("status")
    
    due_part = f" • Due: {format_currency(balance_due)}" if balance_due > 0 else " • Paid"
    quick_actions = []
    if status != "paid":
        quick_actions.append(
            QuickAction(
                id="record_payment",
                label="Record Payment",
                icon="CreditCard",
                href=f"/payments/new?tenant={bill.get('tenant_id')}&bill={bill_id}",
            )
        )
    
    return [
        JourneyEvent(
            id=f"bill_{bill_id}",
            timestamp=_first_instant(bill.get("created_at"), bill.get("bill_date")),
            category=EventCategory.FINANCIAL,
            type=EventType.BILL_GENERATED.value,
            title=f"Bill Generated - {bill_number}",
            description=(
                f"{format_currency(bill.get('total_amount'))} for "
                f"{bill.get('for_month') or 'period not set'}{due_part}"
            ),
            source_table="bills",
            source_id=bill_id,
            amount=as_float(bill.get("total_amount")),
            amount_type=AmountType.DEBIT,
            status=status,
            status_color=status_color(BILL_STATUS_COLORS, status),
            related_entities={
                "property_id": _field(bill.get("property"), "id"),
                "property_name": _field(bill.get("property"), "name"),
                "bill_id": bill_id,
                "bill_number": bill.get("bill_number"),
            },
            metadata={
                "due_date": bill.get("due_date"),
                "balance_due": balance_due,
                "paid_amount": as_float(bill.get("paid_amount")),
                "line_items": bill.get("line_items"),
            },
            icon="FileText",
            action_url=f"/bills/{bill_id}",
            quick_actions=quick_actions,
        )
    ]


def normalize_payment(payment: SourceRecord) -> List[JourneyEvent]:
    payment_id = str(payment["id"])
    for_period = payment.get("for_period")
    period_part = f" for {for_period}" if for_period else ""
    quick_actions = []
    if payment.get("receipt_number"):
        quick_actions.append(
            QuickAction(
                id="view_receipt",
                label="View Receipt",
                icon="FileText",
                href=f"/receipts/{payment_id}",
            )
        )
    
    return [
        JourneyEvent(
            id=f"payment_{payment_id}",
            timestamp=_first_instant(payment.get("created_at"), payment.get("payment_date")),
            category=EventCategory.FINANCIAL,
            type=EventType.PAYMENT_RECEIVED.value,
            title="Payment Received",
            description=(
                f"{format_currency(payment.get('amount'))} via "
                f"{payment_method_label(payment.get('payment_method'))}{period_part}"
            ),
            source_table="payments",
            source_id=payment_id,
            amount=as_float(payment.get("amount")),
            amount_type=AmountType.CREDIT,
            status="completed",
            status_color=StatusColor.SUCCESS,
            related_entities={
                "bill_id": _field(payment.get("bill"), "id"),
                "bill_number": _field(payment.get("bill"), "bill_number"),
                "payment_id": payment_id,
            },
            metadata={
                "payment_method": payment.get("payment_method"),
                "reference_number": payment.get("reference_number"),
                "receipt_number": payment.get("receipt_number"),
                "charge_type": _field(payment.get("charge_type"), "name"),
                "notes": payment.get("notes"),
            },
            icon="CreditCard",
            action_url=f"/payments/{payment_id}",
            quick_actions=quick_actions,
        )
    ]


def normalize_charge(charge: SourceRecord) -> List[JourneyEvent]:
    """Only charges that picked up a late fee show on the timeline."""
    late_fee = as_float(charge.get("late_fee_applied"))
    if late_fee <= 0:
        return []
    
    charge_id = str(charge["id"])
    charge_name = _field(charge.get("charge_type"), "name", "charge")
    return [
        JourneyEvent(
            id=f"charge_latefee_{charge_id}",
            timestamp=_first_instant(charge.get("created_at"), charge.get("due_date")),
            category=EventCategory.FINANCIAL,
            type=EventType.LATE_FEE_APPLIED.value,
            title="Late Fee Applied",
            description=f"{format_currency(late_fee)} late fee for {charge_name}",
            source_table="charges",
            source_id=charge_id,
            amount=late_fee,
            amount_type=AmountType.DEBIT,
            status="applied",
            status_color=StatusColor.WARNING,
            metadata={
                "original_amount": as_float(charge.get("amount")),
                "charge_type": _field(charge.get("charge_type"), "name"),
            },
            icon="AlertTriangle",
        )
    ]


def normalize_complaint(complaint: SourceRecord) -> List[JourneyEvent]:
    complaint_id = str(complaint["id"])
    title = complaint.get("title") or "Untitled"
    status = complaint.get("status")
    
    events = [
        JourneyEvent(
            id=f"complaint_created_{complaint_id}",
            timestamp=_first_instant(complaint.get("created_at")),
            category=EventCategory.COMPLAINT,
            type=EventType.COMPLAINT_RAISED.value,
            title=f"Complaint: {title}",
            description=(
                f"{complaint.get('category') or 'General'} • "
                f"Priority: {complaint.get('priority') or 'normal'}"
            ),
            source_table="complaints",
            source_id=complaint_id,
            status=status,
            status_color=status_color(COMPLAINT_STATUS_COLORS, status),
            related_entities={
                "room_id": _field(complaint.get("room"), "id"),
                "room_number": _field(complaint.get("room"), "room_number"),
                "complaint_id": complaint_id,
            },
            metadata={
                "category": complaint.get("category"),
                "priority": complaint.get("priority"),
                "description": complaint.get("description"),
            },
            icon="AlertCircle",
            action_url=f"/complaints/{complaint_id}",
        )
    ]
    
    resolved_at = to_instant(complaint.get("resolved_at"))
    if resolved_at is not None and status == COMPLAINT_RESOLVED_STATUS:
        events.append(
            JourneyEvent(
                id=f"complaint_resolved_{complaint_id}",
                timestamp=resolved_at,
                category=EventCategory.COMPLAINT,
                type=EventType.COMPLAINT_RESOLVED.value,
                title=f"Complaint Resolved: {title}",
                description=complaint.get("resolution_notes") or "Issue resolved",
                source_table="complaints",
                source_id=complaint_id,
                status="resolved",
                status_color=StatusColor.SUCCESS,
                related_entities={"complaint_id": complaint_id},
                metadata={"resolution_notes": complaint.get("resolution_notes")},
                icon="CheckCircle",
                action_url=f"/complaints/{complaint_id}",
            )
        )
    return events


def normalize_transfer(transfer: SourceRecord) -> List[JourneyEvent]:
    transfer_id = str(transfer["id"])
    old_rent = _optional_amount(transfer.get("old_rent"))
    new_rent = _optional_amount(transfer.get("new_rent"))
    
    amount = None
    amount_type = AmountType.NEUTRAL
    if old_rent is not None and new_rent is not None and new_rent != old_rent:
        amount = abs(new_rent - old_rent)
        amount_type = AmountType.DEBIT if new_rent > old_rent else AmountType.CREDIT
    
    from_room = _field(transfer.get("from_room"), "room_number", "?")
    to_room = _field(transfer.get("to_room"), "room_number", "?")
    return [
        JourneyEvent(
            id=f"transfer_{transfer_id}",
            timestamp=_first_instant(transfer.get("created_at"), transfer.get("transfer_date")),
            category=EventCategory.ACCOMMODATION,
            type=EventType.ROOM_TRANSFER.value,
            title="Room Transfer",
            description=f"{from_room} → {to_room} • {transfer.get('reason') or 'No reason specified'}",
            source_table="room_transfers",
            source_id=transfer_id,
            amount=amount,
            amount_type=amount_type,
            status="completed",
            status_color=StatusColor.PRIMARY,
            related_entities={
                "property_id": _field(transfer.get("to_property"), "id"),
                "property_name": _field(transfer.get("to_property"), "name"),
                "room_id": _field(transfer.get("to_room"), "id"),
                "room_number": _field(transfer.get("to_room"), "room_number"),
            },
            metadata={
                "from_property": _field(transfer.get("from_property"), "name"),
                "from_room": _field(transfer.get("from_room"), "room_number"),
                "to_property": _field(transfer.get("to_property"), "name"),
                "to_room": _field(transfer.get("to_room"), "room_number"),
                "old_rent": old_rent,
                "new_rent": new_rent,
                "reason": transfer.get("reason"),
            },
            icon="ArrowRightLeft",
        )
    ]


def normalize_exit(clearance: SourceRecord) -> List[JourneyEvent]:
    clearance_id = str(clearance["id"])
    settlement = clearance.get("settlement_status") or "pending"
    
    events = [
        JourneyEvent(
            id=f"exit_initiated_{clearance_id}",
            timestamp=_first_instant(clearance.get("created_at"), clearance.get("notice_given_date")),
            category=EventCategory.EXIT,
            type=EventType.EXIT_INITIATED.value,
            title="Exit Process Initiated",
            description=(
                f"Expected exit: {format_date(clearance.get('expected_exit_date'))} • "
                f"Settlement: {settlement}"
            ),
            source_table="exit_clearance",
            source_id=clearance_id,
            status=settlement,
            status_color=StatusColor.SUCCESS if settlement == "cleared" else StatusColor.WARNING,
            related_entities=_placement(clearance),
            metadata={
                "notice_given_date": clearance.get("notice_given_date"),
                "expected_exit_date": clearance.get("expected_exit_date"),
                "total_dues": _optional_amount(clearance.get("total_dues")),
                "total_refundable": _optional_amount(clearance.get("total_refundable")),
                "final_amount": _optional_amount(clearance.get("final_amount")),
                "deductions": clearance.get("deductions"),
            },
            icon="LogOut",
            action_url=f"/exit-clearance/{clearance_id}",
        )
    ]
    
    completed_at = to_instant(clearance.get("completed_at"))
    if completed_at is not None and settlement == "cleared":
        final_amount = as_float(clearance.get("final_amount"))
        events.append(
            JourneyEvent(
                id=f"exit_completed_{clearance_id}",
                timestamp=completed_at,
                category=EventCategory.EXIT,
                type=EventType.CHECKOUT_COMPLETED.value,
                title="Exit Completed",
                description=(
                    f"Final settlement: {format_currency(final_amount)} • "
                    f"Keys returned: {'Yes' if clearance.get('key_returned') else 'No'}"
                ),
                source_table="exit_clearance",
                source_id=clearance_id,
                amount=final_amount,
                amount_type=AmountType.DEBIT if final_amount > 0 else AmountType.CREDIT,
                status="completed",
                status_color=StatusColor.SUCCESS,
                metadata={
                    "room_inspection_done": clearance.get("room_inspection_done"),
                    "key_returned": clearance.get("key_returned"),
                    "actual_exit_date": clearance.get("actual_exit_date"),
                },
                icon="CheckCircle2",
            )
        )
    return events


def normalize_refund(refund: SourceRecord) -> List[JourneyEvent]:
    refund_id = str(refund["id"])
    status = refund.get("status")
    refund_type = (refund.get("refund_type") or "refund").replace("_", " ")
    return [
        JourneyEvent(
            id=f"refund_{refund_id}",
            timestamp=_first_instant(refund.get("processed_at"), refund.get("created_at")),
            category=EventCategory.FINANCIAL,
            type=EventType.REFUND_PROCESSED.value,
            title=REFUND_TITLES.get(status, "Refund Initiated"),
            description=(
                f"{format_currency(refund.get('amount'))} via "
                f"{payment_method_label(refund.get('payment_mode'))} • {refund_type}"
            ),
            source_table="refunds",
            source_id=refund_id,
            amount=as_float(refund.get("amount")),
            amount_type=AmountType.CREDIT,
            status=status,
            status_color=status_color(REFUND_STATUS_COLORS, status, default=StatusColor.WARNING),
            metadata={
                "refund_type": refund.get("refund_type"),
                "payment_mode": refund.get("payment_mode"),
                "reason": refund.get("reason"),
                "notes": refund.get("notes"),
                "refund_date": refund.get("refund_date"),
            },
            icon="RotateCcw",
            action_url=f"/refunds/{refund_id}",
        )
    ]


def normalize_visitor(visitor: SourceRecord) -> List[JourneyEvent]:
    visitor_id = str(visitor["id"])
    checked_out = visitor.get("check_out_time") is not None
    overnight = " • Overnight" if visitor.get("is_overnight") else ""
    return [
        JourneyEvent(
            id=f"visitor_{visitor_id}",
            timestamp=_first_instant(
                visitor.get("check_in_time"),
                visitor.get("created_at"),
                visitor.get("check_in_date"),
            ),
            category=EventCategory.VISITOR,
            type=EventType.VISITOR_LOGGED.value,
            title=f"Visitor: {visitor.get('visitor_name') or 'Unknown'}",
            description=(
                f"{visitor.get('relation') or 'Visitor'} • "
                f"{visitor.get('purpose') or 'Visit'}{overnight}"
            ),
            source_table="visitors",
            source_id=visitor_id,
            status="completed" if checked_out else "active",
            status_color=StatusColor.MUTED if checked_out else StatusColor.INFO,
            metadata={
                "visitor_phone": visitor.get("visitor_phone"),
                "relation": visitor.get("relation"),
                "purpose": visitor.get("purpose"),
                "is_overnight": visitor.get("is_overnight"),
                "check_in_time": visitor.get("check_in_time"),
                "check_out_time": visitor.get("check_out_time"),
            },
            icon="Users",
        )
    ]


def normalize_meter_reading(reading: SourceRecord) -> List[JourneyEvent]:
    reading_id = str(reading["id"])
    units = reading.get("units_consumed")
    units_label = f"{as_float(units):g}" if units is not None else "?"
    return [
        JourneyEvent(
            id=f"meter_{reading_id}",
            timestamp=_first_instant(reading.get("created_at"), reading.get("reading_date")),
            category=EventCategory.ACCOMMODATION,
            type=EventType.METER_READING.value,
            title=f"Meter Reading: {_field(reading.get('charge_type'), 'name', 'Utility')}",
            description=f"{units_label} units consumed • {format_currency(reading.get('amount'))}",
            source_table="meter_readings",
            source_id=reading_id,
            amount=as_float(reading.get("amount")),
            amount_type=AmountType.DEBIT,
            status="recorded",
            status_color=StatusColor.MUTED,
            metadata={
                "reading_value": _optional_amount(reading.get("reading_value")),
                "previous_reading": _optional_amount(reading.get("previous_reading")),
                "units_consumed": _optional_amount(units),
                "charge_type": _field(reading.get("charge_type"), "name"),
                "reading_date": reading.get("reading_date"),
            },
            icon="Gauge",
        )
    ]


# Keyed by source name (the record store's table)
NORMALIZERS: Dict[str, Normalizer] = {
    "tenant_stays": normalize_stay,
    "bills": normalize_bill,
    "payments": normalize_payment,
    "charges": normalize_charge,
    "complaints": normalize_complaint,
    "room_transfers": normalize_transfer,
    "exit_clearance": normalize_exit,
    "refunds": normalize_refund,
    "visitors": normalize_visitor,
    "meter_readings": normalize_meter_reading,
}


def normalize_records(source: str, records: Iterable[SourceRecord]) -> List[JourneyEvent]:
    """Normalize a batch from one source, skipping records that fail."""
    normalizer = NORMALIZERS[source]
    events: List[JourneyEvent] = []
    for record in records:
        try:
            events.extend(normalizer(record))
        except Exception as e:
            record_id = record.get("id") if isinstance(record, Mapping) else None
            logger.warning(
                f"Skipping malformed {source} record {record_id}: {e}",
                extra={"source": source},
            )
    return events

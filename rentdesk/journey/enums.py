"""
Journey vocabularies.
Closed sets used to tag normalized events; the two-level
category/type pair is the discriminant of every JourneyEvent.
"""

from enum import Enum


class EventCategory(str, Enum):
    """Broad bucket an event is filed under (drives timeline filters)."""
    
    ONBOARDING = "onboarding"
    FINANCIAL = "financial"
    ACCOMMODATION = "accommodation"
    COMPLAINT = "complaint"
    EXIT = "exit"
    VISITOR = "visitor"
    DOCUMENT = "document"
    COMMUNICATION = "communication"
    SYSTEM = "system"


class EventType(str, Enum):
    """Specific event kind within a category."""
    
    # Onboarding
    CHECK_IN = "check_in"
    REJOINED = "rejoined"
    
    # Financial
    BILL_GENERATED = "bill_generated"
    PAYMENT_RECEIVED = "payment_received"
    LATE_FEE_APPLIED = "late_fee_applied"
    REFUND_PROCESSED = "refund_processed"
    
    # Accommodation
    ROOM_TRANSFER = "room_transfer"
    METER_READING = "meter_reading"
    
    # Complaint
    COMPLAINT_RAISED = "complaint_raised"
    COMPLAINT_RESOLVED = "complaint_resolved"
    
    # Exit
    EXIT_INITIATED = "exit_initiated"
    CHECKOUT_COMPLETED = "checkout_completed"
    
    # Visitor
    VISITOR_LOGGED = "visitor_logged"


class StatusColor(str, Enum):
    """Abstract severity tag; the UI decides the actual palette."""
    
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    INFO = "info"
    MUTED = "muted"
    PRIMARY = "primary"


class AmountType(str, Enum):
    """Direction of an event's money movement from the owner's ledger view."""
    
    CREDIT = "credit"
    DEBIT = "debit"
    NEUTRAL = "neutral"

"""
Journey result tree.
Every model is frozen: each request builds a fresh tree and nothing
mutates it afterwards.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from rentdesk.journey.enums import AmountType, EventCategory, StatusColor


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Tenant identity
# ---------------------------------------------------------------------------

class PropertySummary(FrozenModel):
    id: str
    name: str
    address: Optional[str] = None


class RoomSummary(FrozenModel):
    id: str
    room_number: str
    room_type: Optional[str] = None


class TenantProfile(FrozenModel):
    """Typed tenant identity loaded once per journey request."""
    
    id: str
    workspace_id: str
    name: str
    status: str
    phone: Optional[str] = None
    phone_numbers: List[str] = Field(default_factory=list)
    email: Optional[str] = None
    photo_url: Optional[str] = None
    check_in_date: Optional[date] = None
    notice_date: Optional[date] = None
    expected_exit_date: Optional[date] = None
    monthly_rent: float = 0.0
    security_deposit: float = 0.0
    security_deposit_paid: float = 0.0
    advance_amount: float = 0.0
    advance_balance: float = 0.0
    agreement_signed: bool = False
    police_verification_status: str = "pending"
    property: Optional[PropertySummary] = None
    room: Optional[RoomSummary] = None
    
    def current_room_id(self) -> Optional[str]:
        return self.room.id if self.room else None


# ---------------------------------------------------------------------------
# Timeline
# ---------------------------------------------------------------------------

class QuickAction(FrozenModel):
    id: str
    label: str
    icon: Optional[str] = None
    href: Optional[str] = None


class JourneyEvent(FrozenModel):
    """
    One normalized timeline entry.
    
    `related_entities` and `metadata` are presentation passthrough only;
    filtering and scoring read typed fields exclusively.
    """
    
    id: str
    timestamp: datetime
    category: EventCategory
    type: str
    title: str
    description: str
    
    # Provenance
    source_table: str
    source_id: str
    
    amount: Optional[float] = None
    amount_type: Optional[AmountType] = None
    
    status: Optional[str] = None
    status_color: Optional[StatusColor] = None
    
    related_entities: Dict[str, Any] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    
    # UI hints
    icon: Optional[str] = None
    action_url: Optional[str] = None
    quick_actions: List[QuickAction] = Field(default_factory=list)


class EventPage(FrozenModel):
    """A page of the merged timeline; total counts filtered events."""
    
    events: List[JourneyEvent]
    total: int


# ---------------------------------------------------------------------------
# Analytics / financial
# ---------------------------------------------------------------------------

class JourneyAnalytics(FrozenModel):
    """Longitudinal counters. Rates are left to the caller."""
    
    # Duration
    total_stay_days: int = 0
    current_stay_days: int = 0
    total_stays: int = 0
    average_stay_duration: int = 0
    
    # Money
    total_revenue: float = 0.0
    total_payments: int = 0
    total_bills_generated: int = 0
    total_bills_paid: int = 0
    bills_paid_on_time: int = 0
    bills_paid_late: int = 0
    average_days_to_pay: int = 0
    
    # Engagement
    total_complaints: int = 0
    complaints_resolved: int = 0
    total_room_transfers: int = 0
    total_visitors: int = 0
    
    # Compliance
    police_verification_status: str = "pending"
    agreement_status: str = "pending"


class ChargeTypeBreakdown(FrozenModel):
    charge_type: str
    charge_type_code: str
    total_billed: float
    total_paid: float
    balance: float


class FinancialSummary(FrozenModel):
    # Deposits
    security_deposit_paid: float = 0.0
    security_deposit_expected: float = 0.0
    advance_amount: float = 0.0
    advance_balance: float = 0.0
    
    # Bills & payments
    total_billed: float = 0.0
    total_paid: float = 0.0
    total_outstanding: float = 0.0
    total_overdue: float = 0.0
    breakdown: List[ChargeTypeBreakdown] = Field(default_factory=list)
    
    # Refunds
    total_refunds_processed: float = 0.0
    pending_refunds: float = 0.0
    
    current_monthly_rent: float = 0.0
    next_due_date: Optional[date] = None
    next_due_amount: Optional[float] = None


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------

Severity = Literal["low", "medium", "high", "critical"]
Priority = Literal["high", "medium", "low"]


class RiskAlert(FrozenModel):
    id: str
    type: str
    severity: Severity
    title: str
    description: str
    created_at: datetime
    action_url: Optional[str] = None


class Recommendation(FrozenModel):
    type: Literal["retention", "collection", "engagement", "verification", "general"]
    priority: Priority
    message: str
    action_url: Optional[str] = None


class PredictiveInsights(FrozenModel):
    payment_reliability_score: int = 50
    payment_reliability_level: Literal["excellent", "good", "fair", "poor", "critical"] = "fair"
    predicted_payment_behavior: Literal["on_time", "slightly_late", "significantly_late"] = "on_time"
    
    churn_risk_score: int = 20
    churn_risk_level: Literal["low", "medium", "high", "critical"] = "low"
    churn_risk_factors: List[str] = Field(default_factory=list)
    
    satisfaction_level: Literal["high", "medium", "low"] = "medium"
    satisfaction_factors: List[str] = Field(default_factory=list)
    
    active_alerts: List[RiskAlert] = Field(default_factory=list)
    recommendations: List[Recommendation] = Field(default_factory=list)
    
    confidence: Literal["high", "medium", "low"] = "low"
    data_points_analyzed: int = 0


# ---------------------------------------------------------------------------
# Visitor linkage
# ---------------------------------------------------------------------------

class LinkedVisitor(FrozenModel):
    visitor_id: str
    visitor_name: str
    visit_date: Optional[str] = None
    relationship: str
    matched_by: Literal["phone", "email", "name", "manual"] = "manual"


class PreTenantVisit(FrozenModel):
    visitor_id: str
    visited_tenant_name: str
    visit_date: Optional[str] = None
    days_before_joining: int
    property_name: Optional[str] = None


class VisitorLinkage(FrozenModel):
    linked: List[LinkedVisitor] = Field(default_factory=list)
    pre_tenant: List[PreTenantVisit] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

class JourneyOptions(FrozenModel):
    """Options accepted by JourneyService.get_tenant_journey."""
    
    tenant_id: str
    workspace_id: str
    events_limit: int = Field(default=50, ge=0)
    events_offset: int = Field(default=0, ge=0)
    event_categories: Optional[List[EventCategory]] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    include_analytics: bool = True
    include_financial: bool = True
    include_insights: bool = True
    include_visitors: bool = True


class TenantJourneyData(FrozenModel):
    tenant_id: str
    tenant_name: str
    tenant_status: str
    tenant_photo_url: Optional[str] = None
    check_in_date: Optional[date] = None
    
    property: Optional[PropertySummary] = None
    room: Optional[RoomSummary] = None
    
    events: List[JourneyEvent]
    total_events: int
    has_more_events: bool
    
    analytics: JourneyAnalytics
    financial: FinancialSummary
    insights: PredictiveInsights
    
    linked_visitors: List[LinkedVisitor]
    pre_tenant_visits: List[PreTenantVisit]
    
    generated_at: datetime

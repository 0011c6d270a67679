"""
Insight Engine.

Deterministic scoring heuristics for operational triage: payment
reliability, churn risk and satisfaction, plus rule-based alerts and
recommendations. Pure function of its inputs; every weight comes from
InsightThresholds.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from rentdesk.journey.formatting import format_currency
from rentdesk.journey.schemas import (
    FinancialSummary,
    JourneyAnalytics,
    PredictiveInsights,
    Recommendation,
    RiskAlert,
    TenantProfile,
)
from rentdesk.journey.thresholds import InsightThresholds
from rentdesk.journey.utils import round_half_up, utc_now


def _clamp(score: int) -> int:
    return max(0, min(100, score))


def payment_reliability_score(
    analytics: JourneyAnalytics,
    financial: FinancialSummary,
    t: InsightThresholds,
) -> int:
    score = t.payment_baseline

    if analytics.total_bills_paid > 0:
        on_time_rate = analytics.bills_paid_on_time / analytics.total_bills_paid
        score += round_half_up(on_time_rate * t.on_time_weight)

        if analytics.average_days_to_pay > t.grace_period_days:
            score -= min(
                t.max_days_to_pay_penalty,
                analytics.average_days_to_pay - t.grace_period_days,
            )

        if analytics.bills_paid_late == 0 and analytics.total_bills_paid >= t.clean_record_min_bills:
            score += t.clean_record_bonus
    elif analytics.total_bills_generated == 0:
        # New tenant prior
        score = t.new_tenant_payment_score

    if financial.total_overdue > 0:
        score -= min(
            t.max_overdue_penalty,
            round_half_up(financial.total_overdue / t.overdue_penalty_unit),
        )

    return _clamp(score)


def payment_level(score: int, t: InsightThresholds) -> str:
    if score >= t.payment_excellent:
        return "excellent"
    if score >= t.payment_good:
        return "good"
    if score >= t.payment_fair:
        return "fair"
    if score >= t.payment_poor:
        return "poor"
    return "critical"


def predicted_behavior(score: int, t: InsightThresholds) -> str:
    if score > t.predicted_on_time_above:
        return "on_time"
    if score > t.predicted_slightly_late_above:
        return "slightly_late"
    return "significantly_late"


def churn_risk(
    tenant: TenantProfile,
    analytics: JourneyAnalytics,
    payment_score: int,
    t: InsightThresholds,
) -> Tuple[int, List[str]]:
    score = t.churn_baseline
    factors: List[str] = []

    if tenant.status == "notice_period":
        score += t.notice_period_weight
        factors.append("Currently on notice period")

    if analytics.total_complaints > t.min_complaints_for_rate:
        unresolved_rate = 1 - analytics.complaints_resolved / analytics.total_complaints
        if unresolved_rate > t.unresolved_complaint_rate:
            score += t.unresolved_complaints_weight
            factors.append("Multiple unresolved complaints")

    if analytics.total_room_transfers >= t.min_transfers:
        score += t.transfers_weight
        factors.append("Multiple room transfers")

    if payment_score < t.low_payment_score:
        score += t.low_payment_weight
        factors.append("Payment reliability concerns")

    if analytics.total_stays > 1 and analytics.average_stay_duration < t.short_stay_days:
        score += t.short_stay_weight
        factors.append("Short average stay duration")

    return _clamp(score), factors


def churn_level(score: int, t: InsightThresholds) -> str:
    if score < t.churn_low_below:
        return "low"
    if score < t.churn_medium_below:
        return "medium"
    if score < t.churn_high_below:
        return "high"
    return "critical"


def satisfaction(analytics: JourneyAnalytics, t: InsightThresholds) -> Tuple[str, List[str]]:
    score = t.satisfaction_baseline
    factors: List[str] = []

    if analytics.total_complaints == 0:
        score += t.no_complaints_bonus
        factors.append("No complaints filed")
    elif analytics.complaints_resolved >= analytics.total_complaints:
        score += t.all_resolved_bonus
        factors.append("All complaints resolved")
    else:
        score -= t.pending_complaints_penalty
        factors.append("Pending complaints")

    if analytics.total_stay_days > t.long_term_days:
        score += t.long_term_bonus
        factors.append("Long-term resident")

    if analytics.total_stays > 1:
        score += t.returning_tenant_bonus
        factors.append("Returning tenant")

    if score >= t.satisfaction_high:
        level = "high"
    elif score >= t.satisfaction_medium:
        level = "medium"
    else:
        level = "low"
    return level, factors


def build_alerts(
    tenant: TenantProfile,
    analytics: JourneyAnalytics,
    financial: FinancialSummary,
    t: InsightThresholds,
    now: datetime,
) -> List[RiskAlert]:
    alerts = []

    if analytics.bills_paid_late >= t.late_payment_alert_count:
        alerts.append(
            RiskAlert(
                id="consecutive_late_payments",
                type="payment_delay",
                severity="high",
                title="Consecutive Late Payments",
                description=f"{analytics.bills_paid_late} bills were paid after due date",
                created_at=now,
            )
        )

    if financial.total_overdue > 0:
        alerts.append(
            RiskAlert(
                id="overdue_amount",
                type="overdue",
                severity="high" if financial.total_overdue > t.high_overdue_amount else "medium",
                title="Overdue Amount",
                description=f"{format_currency(financial.total_overdue)} is overdue",
                created_at=now,
                action_url=f"/payments/new?tenant={tenant.id}",
            )
        )

    if financial.security_deposit_paid < financial.current_monthly_rent:
        alerts.append(
            RiskAlert(
                id="low_deposit",
                type="deposit_low",
                severity="low",
                title="Security Deposit Below Rent",
                description=(
                    f"Deposit ({format_currency(financial.security_deposit_paid)}) "
                    f"is less than monthly rent"
                ),
                created_at=now,
            )
        )

    return alerts


def build_recommendations(
    tenant: TenantProfile,
    analytics: JourneyAnalytics,
    financial: FinancialSummary,
    churn_score: int,
    t: InsightThresholds,
) -> List[Recommendation]:
    recommendations = []

    if financial.total_overdue > 0:
        recommendations.append(
            Recommendation(
                type="collection",
                priority="high" if financial.total_overdue > t.high_overdue_amount else "medium",
                message=(
                    f"Outstanding overdue: {format_currency(financial.total_overdue)}. "
                    f"Send payment reminder."
                ),
                action_url=f"/payments/new?tenant={tenant.id}",
            )
        )

    if churn_score > t.retention_churn_score and tenant.status == "active":
        recommendations.append(
            Recommendation(
                type="retention",
                priority="high",
                message="High churn risk detected. Consider reaching out to understand concerns.",
            )
        )

    if analytics.police_verification_status == "pending":
        recommendations.append(
            Recommendation(
                type="verification",
                priority="medium",
                message="Police verification pending. Complete for compliance.",
                action_url=f"/tenants/{tenant.id}/edit",
            )
        )

    if not tenant.agreement_signed:
        recommendations.append(
            Recommendation(
                type="verification",
                priority="medium",
                message="Rental agreement not signed. Get agreement signed for legal protection.",
            )
        )

    return recommendations


def confidence(analytics: JourneyAnalytics, t: InsightThresholds) -> str:
    if analytics.total_bills_paid >= t.confidence_high_bills:
        return "high"
    if analytics.total_bills_paid >= t.confidence_medium_bills:
        return "medium"
    return "low"


def calculate_insights(
    tenant: TenantProfile,
    analytics: JourneyAnalytics,
    financial: FinancialSummary,
    thresholds: Optional[InsightThresholds] = None,
    now: Optional[datetime] = None,
) -> PredictiveInsights:
    """Score a tenant from its analytics and financial summary. No I/O."""
    t = thresholds or InsightThresholds()
    now = now or utc_now()

    payment_score = payment_reliability_score(analytics, financial, t)
    churn_score, churn_factors = churn_risk(tenant, analytics, payment_score, t)
    satisfaction_level, satisfaction_factors = satisfaction(analytics, t)

    return PredictiveInsights(
        payment_reliability_score=payment_score,
        payment_reliability_level=payment_level(payment_score, t),
        predicted_payment_behavior=predicted_behavior(payment_score, t),
        churn_risk_score=churn_score,
        churn_risk_level=churn_level(churn_score, t),
        churn_risk_factors=churn_factors,
        satisfaction_level=satisfaction_level,
        satisfaction_factors=satisfaction_factors,
        active_alerts=build_alerts(tenant, analytics, financial, t, now),
        recommendations=build_recommendations(tenant, analytics, financial, churn_score, t),
        confidence=confidence(analytics, t),
        data_points_analyzed=(
            analytics.total_payments + analytics.total_bills_generated + analytics.total_complaints
        ),
    )

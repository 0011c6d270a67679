"""
Insight Engine thresholds.
Every weight and cut-off used by the scoring heuristics lives here so it can
be tuned from configuration without touching the scoring code.
"""

from pydantic import BaseModel, ConfigDict


class InsightThresholds(BaseModel):
    """Weights and cut-offs for payment, churn and satisfaction scoring."""

    model_config = ConfigDict(frozen=True)

    # Payment reliability
    payment_baseline: int = 50
    new_tenant_payment_score: int = 60
    on_time_weight: int = 30
    grace_period_days: int = 15
    max_days_to_pay_penalty: int = 15
    clean_record_bonus: int = 10
    clean_record_min_bills: int = 3
    overdue_penalty_unit: float = 1000.0   # 1 point per unit overdue
    max_overdue_penalty: int = 20

    payment_excellent: int = 90
    payment_good: int = 70
    payment_fair: int = 50
    payment_poor: int = 30

    predicted_on_time_above: int = 70
    predicted_slightly_late_above: int = 40

    # Churn risk
    churn_baseline: int = 20
    notice_period_weight: int = 60
    unresolved_complaints_weight: int = 15
    unresolved_complaint_rate: float = 0.5
    min_complaints_for_rate: int = 2      # rule needs more than this many
    transfers_weight: int = 10
    min_transfers: int = 2
    low_payment_score: int = 40
    low_payment_weight: int = 10
    short_stay_weight: int = 15
    short_stay_days: int = 90

    churn_low_below: int = 30
    churn_medium_below: int = 50
    churn_high_below: int = 75

    # Satisfaction
    satisfaction_baseline: int = 70
    no_complaints_bonus: int = 15
    all_resolved_bonus: int = 10
    pending_complaints_penalty: int = 10
    long_term_days: int = 365
    long_term_bonus: int = 10
    returning_tenant_bonus: int = 10

    satisfaction_high: int = 70
    satisfaction_medium: int = 40

    # Alerts and recommendations
    late_payment_alert_count: int = 3
    high_overdue_amount: float = 5000.0
    retention_churn_score: int = 60

    # Confidence
    confidence_high_bills: int = 3
    confidence_medium_bills: int = 1

"""Financial Summarizer - billed/paid/outstanding totals and charge-type breakdown."""

import logging
from datetime import datetime
from typing import Dict, List, Mapping, Sequence

from rentdesk.journey.schemas import ChargeTypeBreakdown, FinancialSummary, TenantProfile
from rentdesk.journey.sources import JourneySources, gather_settled
from rentdesk.journey.utils import as_float, to_day

logger = logging.getLogger(__name__)

# Bills that no longer count towards the outstanding balance
SETTLED_BILL_STATUSES = frozenset({"paid", "cancelled", "waived"})
OPEN_BILL_STATUSES = frozenset({"pending", "partial"})
PENDING_REFUND_STATUSES = frozenset({"pending", "processing"})


def build_breakdown(charges: Sequence[Mapping]) -> List[ChargeTypeBreakdown]:
    """Single pass over charges, bucketed by charge-type code ("other" if untyped)."""
    buckets: Dict[str, Dict] = {}
    for charge in charges:
        charge_type = charge.get("charge_type") or {}
        code = charge_type.get("code") or "other"
        bucket = buckets.setdefault(
            code, {"name": charge_type.get("name") or "Other", "billed": 0.0, "paid": 0.0}
        )
        bucket["billed"] += as_float(charge.get("amount"))
        bucket["paid"] += as_float(charge.get("paid_amount"))

    return [
        ChargeTypeBreakdown(
            charge_type=bucket["name"],
            charge_type_code=code,
            total_billed=bucket["billed"],
            total_paid=bucket["paid"],
            balance=bucket["billed"] - bucket["paid"],
        )
        for code, bucket in buckets.items()
    ]


def calculate_financial_summary(
    tenant: TenantProfile,
    bills: Sequence[Mapping],
    payments: Sequence[Mapping],
    charges: Sequence[Mapping],
    refunds: Sequence[Mapping],
) -> FinancialSummary:
    # Overdue trusts the upstream status, not the due date
    outstanding = sum(
        as_float(b.get("balance_due")) for b in bills if b.get("status") not in SETTLED_BILL_STATUSES
    )
    overdue = sum(as_float(b.get("balance_due")) for b in bills if b.get("status") == "overdue")

    open_bills = [
        (due, bill)
        for bill in bills
        if bill.get("status") in OPEN_BILL_STATUSES
        for due in [to_day(bill.get("due_date"))]
        if due is not None
    ]
    next_bill = min(open_bills, key=lambda pair: (pair[0], str(pair[1].get("id"))), default=None)

    return FinancialSummary(
        security_deposit_paid=tenant.security_deposit_paid,
        security_deposit_expected=tenant.security_deposit,
        advance_amount=tenant.advance_amount,
        advance_balance=tenant.advance_balance,
        total_billed=sum(as_float(b.get("total_amount")) for b in bills),
        total_paid=sum(as_float(p.get("amount")) for p in payments),
        total_outstanding=outstanding,
        total_overdue=overdue,
        breakdown=build_breakdown(charges),
        total_refunds_processed=sum(
            as_float(r.get("amount")) for r in refunds if r.get("status") == "completed"
        ),
        pending_refunds=sum(
            as_float(r.get("amount")) for r in refunds if r.get("status") in PENDING_REFUND_STATUSES
        ),
        current_monthly_rent=tenant.monthly_rent,
        next_due_date=next_bill[0] if next_bill else None,
        next_due_amount=as_float(next_bill[1].get("balance_due")) if next_bill else None,
    )


async def load_financial_summary(
    sources: JourneySources,
    tenant: TenantProfile,
) -> FinancialSummary:
    tenant_id = tenant.id
    data = await gather_settled(
        {
            "bills": sources.fetch_bills(tenant_id),
            "payments": sources.fetch_payments(tenant_id),
            "charges": sources.fetch_charges(tenant_id),
            "refunds": sources.fetch_refunds(tenant_id),
        },
        tenant_id=tenant_id,
    )
    return calculate_financial_summary(
        tenant,
        bills=data["bills"],
        payments=data["payments"],
        charges=data["charges"],
        refunds=data["refunds"],
    )

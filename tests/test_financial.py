"""
Tests for the Financial Summarizer.
"""

from datetime import date

import pytest

from rentdesk.journey.financial import build_breakdown, calculate_financial_summary, load_financial_summary
from rentdesk.journey.sources import JourneySources
from tests.factories import make_tenant


def test_outstanding_and_overdue_follow_status():
    bills = [
        {"id": "b1", "status": "paid", "total_amount": 8000, "balance_due": 0},
        {"id": "b2", "status": "pending", "total_amount": 8000, "balance_due": 8000, "due_date": date(2024, 6, 5)},
        {"id": "b3", "status": "partial", "total_amount": 8000, "balance_due": 3000, "due_date": date(2024, 5, 5)},
        {"id": "b4", "status": "overdue", "total_amount": 8000, "balance_due": 8000, "due_date": date(2024, 4, 5)},
        {"id": "b5", "status": "waived", "total_amount": 500, "balance_due": 500},
        {"id": "b6", "status": "cancelled", "total_amount": 700, "balance_due": 700},
    ]

    summary = calculate_financial_summary(make_tenant(), bills, [], [], [])

    assert summary.total_billed == 33200
    assert summary.total_outstanding == 19000
    # Past due but still "pending" is not overdue
    assert summary.total_overdue == 8000
    assert summary.next_due_date == date(2024, 5, 5)
    assert summary.next_due_amount == 3000


def test_next_due_empty_without_open_bills():
    bills = [{"id": "b1", "status": "overdue", "balance_due": 8000, "due_date": date(2024, 4, 5)}]

    summary = calculate_financial_summary(make_tenant(), bills, [], [], [])

    assert summary.next_due_date is None
    assert summary.next_due_amount is None


def test_breakdown_groups_by_code_with_other_bucket():
    charges = [
        {"amount": 8000, "paid_amount": 8000, "charge_type": {"name": "Rent", "code": "rent"}},
        {"amount": 8000, "paid_amount": 5000, "charge_type": {"name": "Rent", "code": "rent"}},
        {"amount": 600, "paid_amount": 0, "charge_type": {"name": "Electricity", "code": "electricity"}},
        {"amount": 250, "paid_amount": 50, "charge_type": None},
    ]

    breakdown = {b.charge_type_code: b for b in build_breakdown(charges)}

    assert set(breakdown) == {"rent", "electricity", "other"}
    assert breakdown["rent"].total_billed == 16000
    assert breakdown["rent"].balance == 3000
    assert breakdown["other"].charge_type == "Other"
    assert breakdown["other"].balance == 200


def test_deposits_refunds_and_rent():
    tenant = make_tenant(security_deposit=16000.0, security_deposit_paid=10000.0, advance_amount=2000.0, advance_balance=500.0)
    refunds = [
        {"status": "completed", "amount": 4000},
        {"status": "pending", "amount": 1000},
        {"status": "processing", "amount": 250},
        {"status": "failed", "amount": 999},
    ]
    payments = [{"amount": 8000}, {"amount": 1200.5}]

    summary = calculate_financial_summary(tenant, [], payments, [], refunds)

    assert summary.security_deposit_expected == 16000
    assert summary.security_deposit_paid == 10000
    assert summary.advance_amount == 2000
    assert summary.advance_balance == 500
    assert summary.total_paid == 9200.5
    assert summary.total_refunds_processed == 4000
    assert summary.pending_refunds == 1250
    assert summary.current_monthly_rent == 8000


@pytest.mark.asyncio
async def test_load_financial_summary_from_database(session_factory, seeded):
    sources = JourneySources(session_factory)
    tenant = await sources.get_tenant(str(seeded["tenant_id"]), str(seeded["workspace_id"]))

    summary = await load_financial_summary(sources, tenant)

    assert summary.total_billed == 24000
    assert summary.total_paid == 24000
    assert summary.total_outstanding == 0
    assert summary.next_due_date is None
    assert [b.charge_type_code for b in summary.breakdown] == ["rent"]
    assert summary.security_deposit_paid == 16000

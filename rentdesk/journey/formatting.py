"""Display helpers used when building event titles and descriptions."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from rentdesk.journey.utils import as_float, to_day

PAYMENT_METHOD_LABELS = {
    "cash": "Cash",
    "upi": "UPI",
    "bank_transfer": "Bank Transfer",
    "cheque": "Cheque",
    "card": "Card",
    "online": "Online",
}


def _group_indian(digits: str) -> str:
    """1234567 -> 12,34,567"""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_currency(amount: Any) -> str:
    """Whole-rupee INR amount with Indian digit grouping."""
    value = Decimal(str(as_float(amount))).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}₹{_group_indian(str(abs(int(value))))}"


def format_date(value: Any) -> str:
    """5 Jan 2024"""
    try:
        day = to_day(value)
    except (TypeError, ValueError):
        day = None
    if day is None:
        return "Not set"
    return f"{day.day} {day.strftime('%b %Y')}"


def payment_method_label(method: Optional[str]) -> str:
    if not method:
        return "Unknown"
    return PAYMENT_METHOD_LABELS.get(method, method)

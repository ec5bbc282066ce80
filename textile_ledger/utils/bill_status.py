"""
Bill status state machine.

    PENDING -> PARTIAL -> PAID
    PENDING/PARTIAL -> CANCELLED

Every place that records a payment (ledger bills and primary ledger entries)
derives the new status here instead of repeating the comparison.
"""
from decimal import Decimal, ROUND_HALF_UP

from textile_ledger.utils.constants import BillStatus, PAYMENT_TOLERANCE
from textile_ledger.utils.exceptions import InvalidStatusTransitionError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_remaining_amount(total, paid) -> Decimal:
    """Outstanding amount, snapped to zero within the tolerance and never negative."""
    remaining = to_money(total) - to_money(paid)
    if abs(remaining) <= PAYMENT_TOLERANCE:
        return ZERO
    return max(ZERO, remaining)


def derive_bill_status(amount, paid) -> str:
    paid = to_money(paid)
    if paid <= PAYMENT_TOLERANCE:
        return BillStatus.PENDING
    if calculate_remaining_amount(amount, paid) <= PAYMENT_TOLERANCE:
        return BillStatus.PAID
    return BillStatus.PARTIAL


def next_bill_status(current: str, amount, paid) -> str:
    """
    Status after a payment has brought the cumulative paid amount to ``paid``.

    Payments only accumulate, so a PAID bill stays PAID.
    """
    if current == BillStatus.CANCELLED:
        raise InvalidStatusTransitionError("Cannot record a payment against a cancelled bill")
    if current == BillStatus.PAID:
        return BillStatus.PAID
    return derive_bill_status(amount, paid)


def cancel_bill_status(current: str) -> str:
    if current not in (BillStatus.PENDING, BillStatus.PARTIAL):
        raise InvalidStatusTransitionError(f"Cannot cancel a bill in status {current}")
    return BillStatus.CANCELLED

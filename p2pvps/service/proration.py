"""
Proration
---------

Splits a rental payment between the device owner (lessor) and the renter (lessee)
when a rental is ended before the period it paid for has run out.

Each payment in a ledger carries the time the rental period *expires*. When the
most recent payment has not expired yet, the renter is refunded the unused share
of the period and the owner is owed the rest:

>>> payment = PaymentRecord(1000, now + timedelta(hours=12), "refund-addr")
>>> settle(payment, now, timedelta(hours=24))
RefundInstruction(payment_id=None, destination='refund-addr', refund_amount=500, pay_amount=500)

The arithmetic here is pure. Loading, saving, and sending the refund is done by
the :class:`~p2pvps.service.manager.payment_manager.PaymentManager`.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional

from p2pvps.config import rental_period

MICROSECOND = timedelta(microseconds=1)


class ProrationOutcome(str, Enum):
    """The result of processing the payments of a rental account."""

    NO_PAYMENTS = "no_payments"
    """The ledger is empty."""

    PERIOD_ELAPSED = "period_elapsed"
    """The most recent period is fully used up; there is nothing to refund."""

    REFUNDED = "refunded"
    """The most recent payment was split and the refund dispatched."""

    ALREADY_SETTLED = "already_settled"
    """The refund had already been made, so only the ledger was brought up to date."""


@dataclass(frozen=True)
class PaymentRecord:
    amount: int
    """The amount paid, in the smallest currency unit."""

    pay_time: datetime
    """When the paid-for period expires."""

    refund_address: str
    id: Optional[int] = None


@dataclass(frozen=True)
class RefundInstruction:
    """The split of a single payment between refund and owner."""

    payment_id: Optional[int]
    destination: str
    refund_amount: int
    pay_amount: int


@dataclass
class RentalAccount:
    """The payment ledger of a single device, along with what its owner is owed."""

    account_id: int
    payments: List[PaymentRecord] = field(default_factory=list)
    amount_owed_to_lessor: int = 0
    pending_refund: Optional[RefundInstruction] = None
    """A refund that was calculated but not yet confirmed as sent."""

    @property
    def last_payment(self) -> Optional[PaymentRecord]:
        return self.payments[-1] if self.payments else None


def as_utc(value: datetime) -> datetime:
    """Treats naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def settle(payment: PaymentRecord, now: datetime, period: timedelta = rental_period) -> Optional[RefundInstruction]:
    """
    Calculates the refund owed on a payment whose period is cut short at ``now``.

    The refund is rounded down, so any remainder goes to the owner. A remaining time
    greater than the period (clock skew) refunds the whole payment.

    :param payment: The payment to split.
    :param now: The time the rental ends.
    :param period: The length of time the payment covers.
    :return: The split, or None if the period has fully elapsed.
    """
    if period <= timedelta(0):
        raise ValueError(f"The rental period must be positive, not {period}.")

    remaining = payment.pay_time - now
    if remaining <= timedelta(0):
        return None

    refund_amount = payment.amount * (remaining // MICROSECOND) // (period // MICROSECOND)
    refund_amount = min(refund_amount, payment.amount)

    return RefundInstruction(
        payment_id=payment.id,
        destination=payment.refund_address,
        refund_amount=refund_amount,
        pay_amount=payment.amount - refund_amount,
    )


def pending_settlement(account: RentalAccount, now: datetime,
                       period: timedelta = rental_period) -> Optional[RefundInstruction]:
    """
    Gets the split for the account's most recent payment, if it has not run out.

    Only the most recent payment is considered. Earlier payments are assumed to have elapsed.
    """
    if account.last_payment is None:
        return None

    return settle(account.last_payment, now, period)


def apply_settlement(account: RentalAccount, instruction: RefundInstruction):
    """Credits the owner with their share and removes the refunded payment from the ledger."""
    if instruction.payment_id is None:
        account.payments.pop()
    else:
        account.payments = [p for p in account.payments if p.id != instruction.payment_id]

    account.amount_owed_to_lessor += instruction.pay_amount
    account.pending_refund = None


def evaluate(account: RentalAccount, now: datetime, period: timedelta = rental_period) -> Optional[RefundInstruction]:
    """
    Pro-rates the account's most recent payment in memory.

    :return: The refund to send, or None if the account was left untouched.
    """
    instruction = pending_settlement(account, now, period)
    if instruction is not None:
        apply_settlement(account, instruction)
    return instruction

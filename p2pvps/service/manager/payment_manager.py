"""
Payment Manager
---------------

This module is what handles the rental payments in the system.

Responsibilities
================

- recording the payments made for a device
- pro-rating the most recent payment when a rental ends early
- getting a device's ledger

Ending a rental early is done in three steps so that it can always be retried:

1. the split is calculated and saved on the account as its pending refund
2. the refund is sent, identified by the payment it refunds
3. the owner is credited, the payment removed, and the pending refund cleared

If anything fails after the first step, the next attempt resumes the pending
refund as it was calculated instead of calculating it again.
"""

import asyncio
from weakref import WeakValueDictionary
from datetime import datetime, timedelta, timezone
from typing import Optional

from p2pvps import logger
from p2pvps.config import rental_period
from p2pvps.service.payment import RefundDispatcher, RefundOutcome
from p2pvps.service.proration import (
    RentalAccount, PaymentRecord, ProrationOutcome, pending_settlement, apply_settlement, as_utc
)
from p2pvps.store import LedgerStore


class NoSuchAccountError(Exception):
    """Raised when there is no ledger for the given account."""

    def __init__(self, account_id):
        super().__init__(f"No rental account with id {account_id}.")
        self.account_id = account_id


class PaymentManager:
    """
    Pro-rates payments against a ledger store, sending the refunds through the dispatcher.

    Operations on a single account are serialized; different accounts proceed independently.
    """

    def __init__(self, store: LedgerStore, dispatcher: RefundDispatcher, period: timedelta = rental_period):
        self.store = store
        self.dispatcher = dispatcher
        self.period = period

        self._locks: "WeakValueDictionary[int, asyncio.Lock]" = WeakValueDictionary()
        """Maps account ids to the lock for that account, for as long as anything holds or waits on it."""

    def _lock(self, account_id: int) -> asyncio.Lock:
        lock = self._locks.get(account_id)
        if lock is None:
            lock = self._locks[account_id] = asyncio.Lock()
        return lock

    async def get_account(self, account_id: int) -> Optional[RentalAccount]:
        return await self.store.load(account_id)

    async def record_payment(self, account_id: int, amount: int, purchase_time: datetime,
                             refund_address: str) -> PaymentRecord:
        """
        Adds a payment for a rental period bought at the given time.

        The payment is stored with the time the period expires, which is when it is due to the owner.
        """
        if amount < 0:
            raise ValueError("Payments can not be negative.")

        async with self._lock(account_id):
            if await self.store.load(account_id) is None:
                raise NoSuchAccountError(account_id)

            payment = PaymentRecord(amount, as_utc(purchase_time) + self.period, refund_address)
            return await self.store.append(account_id, payment)

    async def process_payments(self, account_id: int, now: datetime = None) -> ProrationOutcome:
        """
        Ends the account's current rental period at ``now``, refunding the unused time.

        :raises NoSuchAccountError: When the account does not exist.
        :raises ServiceError: When the refund can not be sent. The refund is kept pending and sent on retry.
        """
        now = as_utc(now) if now is not None else datetime.now(timezone.utc)

        async with self._lock(account_id):
            account = await self.store.load(account_id)
            if account is None:
                raise NoSuchAccountError(account_id)

            if account.pending_refund is None:
                if not account.payments:
                    return ProrationOutcome.NO_PAYMENTS

                instruction = pending_settlement(account, now, self.period)
                if instruction is None:
                    return ProrationOutcome.PERIOD_ELAPSED

                logger.debug("Pro-rating payment %s on account %s: refund %s, pay %s", instruction.payment_id,
                             account_id, instruction.refund_amount, instruction.pay_amount)
                account.pending_refund = instruction
                await self.store.save(account)
            else:
                instruction = account.pending_refund
                logger.info("Resuming pending refund of payment %s on account %s", instruction.payment_id, account_id)

            outcome = await self.dispatcher.refund(instruction)

            apply_settlement(account, instruction)
            await self.store.save(account)

        logger.info("Refunded %s to %s for account %s (%s)", instruction.refund_amount, instruction.destination,
                    account_id, outcome.value)

        if outcome is RefundOutcome.ALREADY_SETTLED:
            return ProrationOutcome.ALREADY_SETTLED
        return ProrationOutcome.REFUNDED

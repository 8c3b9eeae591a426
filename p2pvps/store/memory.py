"""
Provides a simple in-memory implementation of the ledger store,
for testing and mocking purposes.
"""

from copy import deepcopy
from dataclasses import replace
from itertools import count
from typing import Dict, Optional

from p2pvps.service.proration import RentalAccount, PaymentRecord
from .ledger_store import LedgerStore


class MemoryLedgerStore(LedgerStore):
    """
    Emulates a database by doing all the operation in memory.

    Accounts are copied in and out so that unsaved changes are never visible.
    """

    def __init__(self):
        self.accounts: Dict[int, RentalAccount] = {}
        self._payment_ids = count(1)

    def add_account(self, account_id: int) -> RentalAccount:
        self.accounts[account_id] = RentalAccount(account_id)
        return deepcopy(self.accounts[account_id])

    async def load(self, account_id: int) -> Optional[RentalAccount]:
        account = self.accounts.get(account_id)
        return deepcopy(account) if account is not None else None

    async def save(self, account: RentalAccount):
        if account.account_id not in self.accounts:
            raise KeyError(f"No such account {account.account_id}")

        stored = self.accounts[account.account_id]
        kept = {payment.id for payment in account.payments}
        stored.payments = [payment for payment in stored.payments if payment.id in kept]
        stored.amount_owed_to_lessor = account.amount_owed_to_lessor
        stored.pending_refund = account.pending_refund

    async def append(self, account_id: int, payment: PaymentRecord) -> PaymentRecord:
        payment = replace(payment, id=next(self._payment_ids))
        self.accounts[account_id].payments.append(payment)
        return payment

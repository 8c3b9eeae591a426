"""
This module hosts the abstract base class for all ledger storage.
This class is used to define the "contract" that all storage backends
must adhere to.
"""

from abc import ABC, abstractmethod
from typing import Optional

from p2pvps.service.proration import RentalAccount, PaymentRecord


class LedgerStore(ABC):
    """The abstract store interface."""

    @abstractmethod
    async def load(self, account_id: int) -> Optional[RentalAccount]:
        """
        Loads the rental account with its ledger ordered from oldest to newest.

        :return: The account, or None if it does not exist.
        """

    @abstractmethod
    async def save(self, account: RentalAccount):
        """
        Saves the owed amount and pending refund of the account, removing
        any payments that are no longer in its ledger.
        """

    @abstractmethod
    async def append(self, account_id: int, payment: PaymentRecord) -> PaymentRecord:
        """
        Adds a payment to the end of the account's ledger.

        :return: The stored payment, with its id.
        """

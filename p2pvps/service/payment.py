"""
Refund Dispatch
---------------

Sends refunds to renters. A refund may be sent more than once (for example,
when a crash happens after the refund is sent but before the ledger is saved),
so each refund carries the id of the payment it refunds, and an integration that
no longer finds anything to refund reports it as already settled.
"""
import abc
from enum import Enum
from typing import List, Tuple

from p2pvps import logger
from p2pvps.service.clients import OpenBazaarClient, ServiceNotFoundError
from p2pvps.service.proration import RefundInstruction


class RefundOutcome(str, Enum):
    ACCEPTED = "accepted"
    """The refund was sent."""

    ALREADY_SETTLED = "already_settled"
    """There was nothing left to refund."""


class RefundDispatcher(abc.ABC):

    @abc.abstractmethod
    async def refund(self, instruction: RefundInstruction) -> RefundOutcome:
        """
        Sends the refund in the instruction to its destination.

        :raises ServiceError: When the refund could not be sent.
        """


class DummyRefundDispatcher(RefundDispatcher):
    """Records the refunds instead of sending them."""

    def __init__(self):
        self.refunds: List[Tuple[str, int]] = []

    async def refund(self, instruction: RefundInstruction) -> RefundOutcome:
        self.refunds.append((instruction.destination, instruction.refund_amount))
        return RefundOutcome.ACCEPTED


class OpenBazaarRefundDispatcher(RefundDispatcher):

    def __init__(self, client: OpenBazaarClient):
        self._client = client

    async def refund(self, instruction: RefundInstruction) -> RefundOutcome:
        """Sends the refund through OpenBazaar."""
        payment_id = str(instruction.payment_id) if instruction.payment_id is not None else None

        try:
            await self._client.refund(instruction.destination, instruction.refund_amount, payment_id)
        except ServiceNotFoundError:
            logger.info("Refund for payment %s was already settled.", payment_id)
            return RefundOutcome.ALREADY_SETTLED

        return RefundOutcome.ACCEPTED

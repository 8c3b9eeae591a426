"""
Stores the ledgers in the database, on the private data of each device.
"""

from typing import Optional

from tortoise.transactions import in_transaction

from p2pvps.models import DevicePrivateData, Payment
from p2pvps.service.proration import RentalAccount, PaymentRecord, RefundInstruction, as_utc
from .ledger_store import LedgerStore


class DatabaseLedgerStore(LedgerStore):
    """Maps rental accounts onto :class:`~p2pvps.models.device.DevicePrivateData`, keyed by its id."""

    async def load(self, account_id: int) -> Optional[RentalAccount]:
        private_data = await DevicePrivateData.filter(id=account_id).first()
        if private_data is None:
            return None

        payments = await Payment.filter(device_id=account_id).order_by("pay_time", "id")

        return RentalAccount(
            account_id=private_data.id,
            payments=[
                PaymentRecord(payment.amount, as_utc(payment.pay_time), payment.refund_address, payment.id)
                for payment in payments
            ],
            amount_owed_to_lessor=private_data.money_owed,
            pending_refund=self._pending_refund(private_data),
        )

    async def save(self, account: RentalAccount):
        pending = account.pending_refund
        kept = [payment.id for payment in account.payments if payment.id is not None]

        async with in_transaction():
            await DevicePrivateData.filter(id=account.account_id).update(
                money_owed=account.amount_owed_to_lessor,
                pending_payment_id=pending.payment_id if pending else None,
                pending_refund_address=pending.destination if pending else None,
                pending_refund_amount=pending.refund_amount if pending else None,
                pending_pay_amount=pending.pay_amount if pending else None,
            )
            removed = Payment.filter(device_id=account.account_id)
            if kept:
                removed = removed.filter(id__not_in=kept)
            await removed.delete()

    async def append(self, account_id: int, payment: PaymentRecord) -> PaymentRecord:
        stored = await Payment.create(
            device_id=account_id,
            amount=payment.amount,
            pay_time=payment.pay_time,
            refund_address=payment.refund_address,
        )
        return PaymentRecord(stored.amount, as_utc(stored.pay_time), stored.refund_address, stored.id)

    @staticmethod
    def _pending_refund(private_data: DevicePrivateData) -> Optional[RefundInstruction]:
        if private_data.pending_payment_id is None:
            return None

        return RefundInstruction(
            payment_id=private_data.pending_payment_id,
            destination=private_data.pending_refund_address,
            refund_amount=private_data.pending_refund_amount,
            pay_amount=private_data.pending_pay_amount,
        )

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from p2pvps.service.clients import ServiceError
from p2pvps.service.manager.payment_manager import PaymentManager, NoSuchAccountError
from p2pvps.service.payment import RefundDispatcher, RefundOutcome, DummyRefundDispatcher
from p2pvps.service.proration import ProrationOutcome, RefundInstruction
from p2pvps.store import MemoryLedgerStore, DatabaseLedgerStore
from p2pvps.service.access.devices import get_device_private

PERIOD = timedelta(hours=24)
PURCHASED = datetime(2019, 3, 1, tzinfo=timezone.utc)


class FlakyDispatcher(RefundDispatcher):
    """Fails the first ``failures`` refunds, then behaves like the dummy dispatcher."""

    def __init__(self, failures=1, outcome=RefundOutcome.ACCEPTED):
        self.failures = failures
        self.outcome = outcome
        self.instructions = []

    async def refund(self, instruction: RefundInstruction) -> RefundOutcome:
        self.instructions.append(instruction)
        if self.failures:
            self.failures -= 1
            raise ServiceError("openbazaar is down")
        return self.outcome


@pytest.fixture
def store():
    store = MemoryLedgerStore()
    store.add_account(1)
    return store


@pytest.fixture
def dispatcher():
    return DummyRefundDispatcher()


@pytest.fixture
def manager(store, dispatcher):
    return PaymentManager(store, dispatcher, PERIOD)


class TestRecordPayment:

    async def test_pay_time_is_end_of_period(self, manager, store):
        """Assert that a payment is stored with the time its period expires."""
        payment = await manager.record_payment(1, 1000, PURCHASED, "renter")
        assert payment.pay_time == PURCHASED + PERIOD
        assert payment.id is not None
        assert store.accounts[1].payments == [payment]

    async def test_naive_purchase_time_is_utc(self, manager):
        payment = await manager.record_payment(1, 1000, PURCHASED.replace(tzinfo=None), "renter")
        assert payment.pay_time == PURCHASED + PERIOD

    async def test_negative_payment(self, manager):
        with pytest.raises(ValueError):
            await manager.record_payment(1, -1, PURCHASED, "renter")

    async def test_missing_account(self, manager):
        with pytest.raises(NoSuchAccountError):
            await manager.record_payment(2, 1000, PURCHASED, "renter")


class TestProcessPayments:

    async def test_half_refund(self, manager, store, dispatcher):
        """Assert that ending a rental half way through refunds half the payment."""
        await manager.record_payment(1, 1000, PURCHASED, "renter")

        outcome = await manager.process_payments(1, PURCHASED + timedelta(hours=12))

        assert outcome == ProrationOutcome.REFUNDED
        assert dispatcher.refunds == [("renter", 500)]
        assert store.accounts[1].payments == []
        assert store.accounts[1].amount_owed_to_lessor == 500
        assert store.accounts[1].pending_refund is None

    async def test_no_payments(self, manager, dispatcher):
        """Assert that an empty ledger is not an error."""
        assert await manager.process_payments(1, PURCHASED) == ProrationOutcome.NO_PAYMENTS
        assert dispatcher.refunds == []

    async def test_period_elapsed(self, manager, store, dispatcher):
        """Assert that nothing happens when the rental already ran its course."""
        payment = await manager.record_payment(1, 1000, PURCHASED, "renter")

        outcome = await manager.process_payments(1, PURCHASED + PERIOD)

        assert outcome == ProrationOutcome.PERIOD_ELAPSED
        assert dispatcher.refunds == []
        assert store.accounts[1].payments == [payment]
        assert store.accounts[1].amount_owed_to_lessor == 0

    async def test_zero_refund_is_dispatched(self, manager, store, dispatcher):
        await manager.record_payment(1, 999, PURCHASED, "renter")

        outcome = await manager.process_payments(1, PURCHASED + PERIOD - timedelta(seconds=1))

        assert outcome == ProrationOutcome.REFUNDED
        assert dispatcher.refunds == [("renter", 0)]
        assert store.accounts[1].amount_owed_to_lessor == 999

    async def test_second_call_does_not_double_pay(self, manager, store, dispatcher):
        """Assert that processing twice only refunds and credits once."""
        await manager.record_payment(1, 1000, PURCHASED - PERIOD, "renter")
        await manager.record_payment(1, 1000, PURCHASED, "renter")
        now = PURCHASED + timedelta(hours=6)

        assert await manager.process_payments(1, now) == ProrationOutcome.REFUNDED
        assert await manager.process_payments(1, now) == ProrationOutcome.PERIOD_ELAPSED

        assert dispatcher.refunds == [("renter", 750)]
        assert store.accounts[1].amount_owed_to_lessor == 250
        assert len(store.accounts[1].payments) == 1

    async def test_missing_account(self, manager):
        with pytest.raises(NoSuchAccountError):
            await manager.process_payments(2, PURCHASED)

    async def test_failed_refund_stays_pending(self, store):
        """Assert that a refund that could not be sent is kept, with the ledger untouched."""
        manager = PaymentManager(store, FlakyDispatcher(failures=1), PERIOD)
        await manager.record_payment(1, 1000, PURCHASED, "renter")

        with pytest.raises(ServiceError):
            await manager.process_payments(1, PURCHASED + timedelta(hours=12))

        account = store.accounts[1]
        assert account.pending_refund.refund_amount == 500
        assert account.pending_refund.pay_amount == 500
        assert len(account.payments) == 1
        assert account.amount_owed_to_lessor == 0

    async def test_retry_resumes_pending_refund(self, store):
        """Assert that a retry sends the refund as it was calculated, not against the new time."""
        dispatcher = FlakyDispatcher(failures=1)
        manager = PaymentManager(store, dispatcher, PERIOD)
        await manager.record_payment(1, 1000, PURCHASED, "renter")

        with pytest.raises(ServiceError):
            await manager.process_payments(1, PURCHASED + timedelta(hours=12))

        outcome = await manager.process_payments(1, PURCHASED + timedelta(hours=18))

        assert outcome == ProrationOutcome.REFUNDED
        assert dispatcher.instructions[0] == dispatcher.instructions[1]
        assert store.accounts[1].amount_owed_to_lessor == 500
        assert store.accounts[1].payments == []
        assert store.accounts[1].pending_refund is None

    async def test_already_settled(self, store):
        """Assert that a refund the integration already made still brings the ledger up to date."""
        manager = PaymentManager(store, FlakyDispatcher(0, RefundOutcome.ALREADY_SETTLED), PERIOD)
        await manager.record_payment(1, 1000, PURCHASED, "renter")

        outcome = await manager.process_payments(1, PURCHASED + timedelta(hours=12))

        assert outcome == ProrationOutcome.ALREADY_SETTLED
        assert store.accounts[1].payments == []
        assert store.accounts[1].amount_owed_to_lessor == 500

    async def test_concurrent_calls_refund_once(self, manager, store, dispatcher):
        """Assert that concurrent processing of the same account only refunds once."""
        await manager.record_payment(1, 1000, PURCHASED, "renter")
        now = PURCHASED + timedelta(hours=12)

        outcomes = await asyncio.gather(*(manager.process_payments(1, now) for _ in range(5)))

        assert sorted(outcomes) == sorted([ProrationOutcome.REFUNDED] + [ProrationOutcome.NO_PAYMENTS] * 4)
        assert dispatcher.refunds == [("renter", 500)]
        assert store.accounts[1].amount_owed_to_lessor == 500

    async def test_account_locks_are_released(self, manager, store):
        """Assert that the manager does not hold on to the lock of an account nobody is using."""
        store.add_account(2)
        await manager.record_payment(1, 1000, PURCHASED, "renter")
        await asyncio.gather(manager.process_payments(1), manager.process_payments(2), manager.process_payments(1))

        assert len(manager._locks) == 0

class TestProcessPaymentsDatabase:

    async def test_half_refund(self, random_device):
        """Assert that the database ledger is settled and the payment removed."""
        dispatcher = DummyRefundDispatcher()
        manager = PaymentManager(DatabaseLedgerStore(), dispatcher, PERIOD)
        private_data = await get_device_private(random_device.id)
        await manager.record_payment(private_data.id, 1000, PURCHASED, "renter")

        outcome = await manager.process_payments(private_data.id, PURCHASED + timedelta(hours=12))

        assert outcome == ProrationOutcome.REFUNDED
        assert dispatcher.refunds == [("renter", 500)]
        account = await manager.get_account(private_data.id)
        assert account.payments == []
        assert account.amount_owed_to_lessor == 500

    async def test_pending_refund_survives_reload(self, random_device):
        """Assert that a failed refund is stored and resumed by a fresh manager."""
        private_data = await get_device_private(random_device.id)
        failing = PaymentManager(DatabaseLedgerStore(), FlakyDispatcher(failures=1), PERIOD)
        await failing.record_payment(private_data.id, 1000, PURCHASED, "renter")

        with pytest.raises(ServiceError):
            await failing.process_payments(private_data.id, PURCHASED + timedelta(hours=6))

        dispatcher = DummyRefundDispatcher()
        manager = PaymentManager(DatabaseLedgerStore(), dispatcher, PERIOD)
        outcome = await manager.process_payments(private_data.id, PURCHASED + timedelta(hours=20))

        assert outcome == ProrationOutcome.REFUNDED
        assert dispatcher.refunds == [("renter", 750)]
        account = await manager.get_account(private_data.id)
        assert account.pending_refund is None
        assert account.amount_owed_to_lessor == 250

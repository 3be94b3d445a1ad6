import datetime
from decimal import Decimal

from django.test import SimpleTestCase

from ..constants import FULLY_ALLOCATED, PARTIAL, UNALLOCATED
from ..services.allocation import PlannedAllocation
from ..services.fifo import FifoEntry, FifoPayment, fifo_match


def d(day):
    return datetime.date(2024, 1, day)


class FifoMatchTests(SimpleTestCase):
    def test_oldest_payment_settles_oldest_entry(self):
        entries = [
            FifoEntry(id=1, entry_date=d(1), total_amount=Decimal("100")),
            FifoEntry(id=2, entry_date=d(5), total_amount=Decimal("50")),
        ]
        payments = [
            FifoPayment(id=1, payment_date=d(2), amount=Decimal("120")),
            FifoPayment(id=2, payment_date=d(10), amount=Decimal("30")),
        ]
        outcome = fifo_match(payments, entries)

        self.assertEqual(
            outcome.allocations,
            [
                PlannedAllocation(payment_id=1, entry_id=1, amount=Decimal("100")),
                PlannedAllocation(payment_id=1, entry_id=2, amount=Decimal("20")),
                PlannedAllocation(payment_id=2, entry_id=2, amount=Decimal("30")),
            ],
        )
        self.assertEqual(outcome.payment_status, {1: FULLY_ALLOCATED, 2: FULLY_ALLOCATED})
        self.assertEqual(outcome.entry_remaining, {1: Decimal("0"), 2: Decimal("0")})

    def test_input_order_does_not_matter(self):
        entries = [
            FifoEntry(id=7, entry_date=d(3), total_amount=Decimal("40")),
            FifoEntry(id=5, entry_date=d(3), total_amount=Decimal("40")),
        ]
        payments = [FifoPayment(id=1, payment_date=d(1), amount=Decimal("50"))]
        outcome = fifo_match(payments, list(reversed(entries)))
        # same date: lower id first
        self.assertEqual(
            [(a.entry_id, a.amount) for a in outcome.allocations],
            [(5, Decimal("40")), (7, Decimal("10"))],
        )
        self.assertEqual(outcome.entry_remaining[7], Decimal("30"))

    def test_advance_payment_left_partial(self):
        entries = [FifoEntry(id=1, entry_date=d(1), total_amount=Decimal("25.50"))]
        payments = [
            FifoPayment(id=1, payment_date=d(1), amount=Decimal("100.00")),
            FifoPayment(id=2, payment_date=d(2), amount=Decimal("10.00")),
        ]
        outcome = fifo_match(payments, entries)
        self.assertEqual(outcome.payment_remaining[1], Decimal("74.50"))
        self.assertEqual(outcome.payment_status, {1: PARTIAL, 2: UNALLOCATED})

    def test_no_entries_means_nothing_allocated(self):
        payments = [FifoPayment(id=1, payment_date=d(1), amount=Decimal("10"))]
        outcome = fifo_match(payments, [])
        self.assertEqual(outcome.allocations, [])
        self.assertEqual(outcome.payment_status, {1: UNALLOCATED})

    def test_totals_are_conserved(self):
        entries = [
            FifoEntry(id=i, entry_date=d(i), total_amount=Decimal("33.33"))
            for i in range(1, 6)
        ]
        payments = [
            FifoPayment(id=i, payment_date=d(i), amount=Decimal("41.17"))
            for i in range(1, 4)
        ]
        outcome = fifo_match(payments, entries)
        allocated = sum((a.amount for a in outcome.allocations), Decimal("0"))
        # every payment is used up before entries run out
        self.assertEqual(allocated, Decimal("123.51"))
        for a in outcome.allocations:
            self.assertGreater(a.amount, 0)

from decimal import Decimal

from django.test import SimpleTestCase

from ..constants import FULLY_ALLOCATED, PARTIAL, UNALLOCATED
from ..exceptions import (EntryOverAllocated, InvalidAllocationRequest,
                          LedgerEntryNotFound, PaymentOverAllocated,
                          VendorMismatch)
from ..services.allocation import (AllocationLine, EntryBalance,
                                   PaymentBalance, derive_allocation_status,
                                   parse_allocation_lines,
                                   plan_payment_allocation)


class DeriveStatusTests(SimpleTestCase):
    def test_zero_is_unallocated(self):
        self.assertEqual(
            derive_allocation_status(Decimal("0.00"), Decimal("100.00")), UNALLOCATED)

    def test_within_tolerance_is_fully_allocated(self):
        self.assertEqual(
            derive_allocation_status(Decimal("100.00"), Decimal("100.00")), FULLY_ALLOCATED)
        self.assertEqual(
            derive_allocation_status(Decimal("99.995"), Decimal("100.00")), FULLY_ALLOCATED)

    def test_anything_else_is_partial(self):
        self.assertEqual(
            derive_allocation_status(Decimal("99.99"), Decimal("100.00")), PARTIAL)
        self.assertEqual(
            derive_allocation_status(Decimal("0.01"), Decimal("100.00")), PARTIAL)


class ParseAllocationLinesTests(SimpleTestCase):
    def test_accepts_strings_ints_and_floats(self):
        lines = parse_allocation_lines([
            {"entry_id": "3", "amount": "10.50"},
            {"entry_id": 4, "amount": 7},
            {"entry_id": 5, "amount": 0.1},
        ])
        self.assertEqual(
            lines,
            [
                AllocationLine(entry_id=3, amount=Decimal("10.50")),
                AllocationLine(entry_id=4, amount=Decimal("7")),
                AllocationLine(entry_id=5, amount=Decimal("0.1")),
            ],
        )

    def test_empty_or_missing_list_is_rejected(self):
        for raw in (None, [], {}, "x"):
            with self.subTest(raw=raw):
                with self.assertRaises(InvalidAllocationRequest) as ctx:
                    parse_allocation_lines(raw)
                if raw in (None, []):
                    self.assertEqual(ctx.exception.message, "No allocations provided")

    def test_bad_lines_are_rejected(self):
        bad = [
            ["not-a-dict"],
            [{"amount": "10"}],
            [{"entry_id": "abc", "amount": "10"}],
            [{"entry_id": 1}],
            [{"entry_id": 1, "amount": "ten"}],
            [{"entry_id": 1, "amount": "0"}],
            [{"entry_id": 1, "amount": "-5"}],
            [{"entry_id": 1, "amount": "NaN"}],
            [{"entry_id": 1, "amount": "1.005"}],
            [{"entry_id": 1, "amount": "1e30"}],
            [{"entry_id": 1, "amount": "Infinity"}],
            [{"entry_id": 10**20, "amount": "10"}],
            [{"entry_id": 0, "amount": "10"}],
            [{"entry_id": True, "amount": "10"}],
        ]
        for raw in bad:
            with self.subTest(raw=raw):
                with self.assertRaises(InvalidAllocationRequest):
                    parse_allocation_lines(raw)

    def test_out_of_range_values_name_the_line(self):
        with self.assertRaises(InvalidAllocationRequest) as ctx:
            parse_allocation_lines([
                {"entry_id": 1, "amount": "5.00"},
                {"entry_id": 1, "amount": "1e30"},
            ])
        self.assertEqual(ctx.exception.detail, {"index": 1})
        self.assertIn("cannot exceed", ctx.exception.message)

        with self.assertRaises(InvalidAllocationRequest) as ctx:
            parse_allocation_lines([{"entry_id": 10**20, "amount": "5.00"}])
        self.assertEqual(ctx.exception.message, "Allocation #1 has an invalid entry_id")


class PlanPaymentAllocationTests(SimpleTestCase):
    def setUp(self):
        self.payment = PaymentBalance(id=1, vendor_id=10, amount=Decimal("100.00"))
        self.entries = {
            1: EntryBalance(id=1, vendor_id=10, total_amount=Decimal("60.00")),
            2: EntryBalance(id=2, vendor_id=10, total_amount=Decimal("80.00"),
                            allocated=Decimal("50.00")),
            3: EntryBalance(id=3, vendor_id=99, total_amount=Decimal("10.00")),
        }

    def lines(self, *pairs):
        return [AllocationLine(entry_id=e, amount=Decimal(a)) for e, a in pairs]

    def test_partial_plan(self):
        result = plan_payment_allocation(
            self.payment, self.entries, self.lines((1, "60.00")))
        self.assertTrue(result.ok)
        self.assertEqual(result.status, PARTIAL)
        self.assertEqual(result.allocated_total, Decimal("60.00"))
        self.assertEqual(len(result.allocations), 1)
        self.assertEqual(result.allocations[0].payment_id, 1)

    def test_full_plan_across_entries(self):
        result = plan_payment_allocation(
            self.payment, self.entries, self.lines((1, "70.00"), (2, "30.00")))
        # 70 > 60 due on entry 1
        self.assertIsInstance(result.error, EntryOverAllocated)

        result = plan_payment_allocation(
            self.payment, self.entries, self.lines((1, "60.00"), (2, "30.00")))
        self.assertTrue(result.ok)
        self.assertEqual(result.status, PARTIAL)

        result = plan_payment_allocation(
            self.payment, self.entries, self.lines((1, "60.00"), (2, "30.00"), (1, "0.01")))
        # the due is exact: one extra cent is refused
        self.assertIsInstance(result.error, EntryOverAllocated)
        self.assertEqual(result.allocations, [])

    def test_payment_total_checked_first(self):
        # entry 3 is another vendor's, but the total is what fails
        result = plan_payment_allocation(
            self.payment, self.entries, self.lines((3, "90.00"), (1, "20.00")))
        self.assertIsInstance(result.error, PaymentOverAllocated)
        self.assertEqual(result.allocations, [])
        self.assertEqual(
            result.error.as_payload(),
            {
                "message": "Allocation exceeds payment amount",
                "currentAllocated": "0.00",
                "requestedTotal": "110.00",
                "paymentAmount": "100.00",
            },
        )

    def test_existing_allocations_count_against_payment(self):
        payment = PaymentBalance(id=1, vendor_id=10, amount=Decimal("100.00"),
                                 allocated=Decimal("90.00"))
        result = plan_payment_allocation(payment, self.entries, self.lines((1, "10.01")))
        self.assertIsInstance(result.error, PaymentOverAllocated)

        result = plan_payment_allocation(payment, self.entries, self.lines((1, "10.00")))
        self.assertEqual(result.status, FULLY_ALLOCATED)

    def test_unknown_entry(self):
        result = plan_payment_allocation(self.payment, self.entries, self.lines((42, "1.00")))
        self.assertIsInstance(result.error, LedgerEntryNotFound)
        self.assertEqual(result.error.status_code, 404)

    def test_vendor_mismatch(self):
        result = plan_payment_allocation(self.payment, self.entries, self.lines((3, "5.00")))
        self.assertIsInstance(result.error, VendorMismatch)

    def test_due_is_tracked_within_a_batch(self):
        # entry 2 has 30 due; two lines of 20 exceed it together
        result = plan_payment_allocation(
            self.payment, self.entries, self.lines((2, "20.00"), (2, "20.00")))
        self.assertIsInstance(result.error, EntryOverAllocated)
        self.assertEqual(result.error.detail["dueAmount"], "10.00")

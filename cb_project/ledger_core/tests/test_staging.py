import datetime
import os
import tempfile
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, TestCase
from openpyxl import Workbook

from ..constants import FULLY_ALLOCATED, UNALLOCATED
from ..models import AuditLog, Payment
from ..services import load_staging_workbook, sync_staged_payments
from ..services.staging import (coerce_amount, coerce_date, compact_key,
                                map_payment_mode)
from .factories import make_entry, make_item, make_payment, make_vendor


def write_workbook(path, vendors, payments):
    wb = Workbook()
    ws = wb.active
    ws.title = "vendors_master"
    ws.append(["code", "name"])
    for row in vendors:
        ws.append(row)
    ws = wb.create_sheet("payments")
    ws.append(["payment_date", "paid_to_vendor_code", "amount",
               "payment_mode", "reference", "remarks"])
    for row in payments:
        ws.append(row)
    wb.save(path)


class NormalizationTests(SimpleTestCase):
    def test_compact_key(self):
        self.assertEqual(compact_key("M/s. Sharma & Sons"), "mssharmasons")
        self.assertEqual(compact_key(None), "")

    def test_map_payment_mode(self):
        cases = {
            None: "CASH",
            "": "CASH",
            "neft": "BANK_TRANSFER",
            "Online transfer": "BANK_TRANSFER",
            "GPay": "UPI",
            "cash": "CASH",
            "Cheque #441": "CHEQUE",
            "barter": "OTHER",
        }
        for raw, mode in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(map_payment_mode(raw), mode)

    def test_coerce_date(self):
        expected = datetime.date(2024, 1, 2)
        for raw in (datetime.datetime(2024, 1, 2, 9, 30), expected, 45293,
                    "2024-01-02", "02-01-2024", "02/01/2024", "02.01.2024"):
            with self.subTest(raw=raw):
                self.assertEqual(coerce_date(raw), expected)
        self.assertIsNone(coerce_date(""))
        self.assertIsNone(coerce_date("someday"))

    def test_coerce_amount(self):
        self.assertEqual(coerce_amount("1,500.5"), Decimal("1500.50"))
        self.assertEqual(coerce_amount(12), Decimal("12.00"))
        self.assertIsNone(coerce_amount("abc"))
        self.assertIsNone(coerce_amount("-3"))
        self.assertIsNone(coerce_amount(None))
        # beyond the money column
        self.assertIsNone(coerce_amount("1e30"))
        self.assertIsNone(coerce_amount("Infinity"))


class StagedPaymentImportTests(TestCase):
    def setUp(self):
        self.vendor = make_vendor("Shree Cement Traders")
        self.existing = make_payment(self.vendor, "120.00", day=2, payment_mode="CASH")
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, "staging.xlsx")
        write_workbook(
            self.path,
            vendors=[("V1", "SHREE CEMENT  TRADERS"), ("V2", "Unknown Co")],
            payments=[
                (datetime.datetime(2024, 1, 2), "V1", 120, "NEFT", "UTR123", "first"),
                ("05-01-2024", "V1", "1,500.00", "gpay", None, None),
                ("2024-01-06", "V2", 40, "cash", None, None),
                ("not a date", "V1", 10, "cash", None, None),
            ],
        )

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_load_workbook_rows(self):
        vendor_rows, payment_rows = load_staging_workbook(self.path)
        self.assertEqual(vendor_rows[0], {"code": "V1", "name": "SHREE CEMENT  TRADERS"})
        self.assertEqual(len(payment_rows), 4)
        self.assertEqual(payment_rows[0]["reference"], "UTR123")

    def test_missing_sheet_is_an_error(self):
        path = os.path.join(self.tmpdir.name, "empty.xlsx")
        Workbook().save(path)
        with self.assertRaises(ValueError):
            load_staging_workbook(path)

    def test_sync_updates_matches_and_creates_the_rest(self):
        vendor_rows, payment_rows = load_staging_workbook(self.path)
        with self.assertLogs("ledger_core.services.staging", level="WARNING") as logs:
            summary = sync_staged_payments(vendor_rows, payment_rows)

        self.assertEqual(summary.updated, 1)
        self.assertEqual(summary.created, 1)
        self.assertEqual(summary.skipped, 2)
        self.assertEqual(summary.unresolved_vendors, 1)
        self.assertTrue(any("Unknown Co" in line for line in logs.output))

        self.existing.refresh_from_db()
        self.assertEqual(self.existing.payment_mode, "BANK_TRANSFER")
        self.assertEqual(self.existing.reference_no, "UTR123")
        self.assertEqual(self.existing.remarks, "first")

        created = Payment.objects.exclude(pk=self.existing.pk).get()
        self.assertEqual(created.amount, Decimal("1500.00"))
        self.assertEqual(created.payment_date, datetime.date(2024, 1, 5))
        self.assertEqual(created.payment_mode, "UPI")
        self.assertEqual(created.allocation_status, UNALLOCATED)
        self.assertTrue(AuditLog.objects.filter(action="import").exists())

    def test_second_import_only_updates(self):
        vendor_rows, payment_rows = load_staging_workbook(self.path)
        with self.assertLogs("ledger_core.services.staging", level="WARNING"):
            sync_staged_payments(vendor_rows, payment_rows)
            summary = sync_staged_payments(vendor_rows, payment_rows)
        self.assertEqual(summary.created, 0)
        self.assertEqual(summary.updated, 2)
        self.assertEqual(Payment.objects.count(), 2)


class ImportCommandTests(TestCase):
    def setUp(self):
        self.vendor = make_vendor("Shree Cement Traders")
        make_entry(make_item(), self.vendor, "300.00", day=1)
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, "staging.xlsx")
        write_workbook(
            self.path,
            vendors=[("V1", "Shree Cement Traders")],
            payments=[("2024-01-03", "V1", 300, "RTGS", "R-1", None)],
        )

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_import_and_reconcile(self):
        out = StringIO()
        call_command("import_staged_payments", self.path, "--reconcile", stdout=out)
        self.assertIn("1 created", out.getvalue())
        self.assertEqual(Payment.objects.get().allocation_status, FULLY_ALLOCATED)

    def test_unreadable_workbook(self):
        with self.assertRaises(CommandError):
            call_command("import_staged_payments",
                         os.path.join(self.tmpdir.name, "missing.xlsx"), stdout=StringIO())

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from ledger_core.exceptions import ManualAllocationsPresent
from ledger_core.services import (load_staging_workbook, reconcile_allocations,
                                  sync_staged_payments)


class Command(BaseCommand):
    help = "Import payments from a staging workbook (vendors_master + payments sheets)."

    # Define command-line arguments
    def add_arguments(self, parser):
        parser.add_argument("path", help="Path to the .xlsx staging workbook.")
        parser.add_argument(
            "--reconcile",
            action="store_true",
            help="Run FIFO reconciliation after the import, in the same transaction.",
        )
        parser.add_argument(
            "--discard-manual",
            action="store_true",
            help="With --reconcile, replace hand-placed allocations too.",
        )

    def handle(self, *args, **options):
        try:
            vendor_rows, payment_rows = load_staging_workbook(options["path"])
        except (OSError, ValueError) as e:
            raise CommandError(f"Cannot read workbook: {e}")

        self.stdout.write(self.style.NOTICE(
            f"Read {len(vendor_rows)} vendor row(s), {len(payment_rows)} payment row(s)"))

        # a refused reconciliation also undoes the import
        with transaction.atomic():
            summary = sync_staged_payments(vendor_rows, payment_rows)
            self.stdout.write(
                self.style.SUCCESS(
                    f"Payments: {summary.updated} updated, {summary.created} created, "
                    f"{summary.skipped} skipped ({summary.unresolved_vendors} unknown vendor(s))."
                )
            )

            if options["reconcile"]:
                try:
                    result = reconcile_allocations(
                        discard_manual=options["discard_manual"])
                except ManualAllocationsPresent as e:
                    raise CommandError(
                        f"{e.message} Re-run with --discard-manual to replace them."
                    )
                self.stdout.write(self.style.SUCCESS(
                    f"Reconciled: {result.allocations_created} allocation(s) created."))

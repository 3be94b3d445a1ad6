from django.core.management.base import BaseCommand, CommandError

from ledger_core.exceptions import ManualAllocationsPresent
from ledger_core.services import reconcile_allocations


class Command(BaseCommand):
    help = "Rebuild every payment allocation oldest-first (FIFO), vendor by vendor."

    def add_arguments(self, parser):
        parser.add_argument(
            "--discard-manual",
            action="store_true",
            help="Also throw away hand-placed allocations before rebuilding.",
        )

    def handle(self, *args, **options):
        try:
            summary = reconcile_allocations(discard_manual=options["discard_manual"])
        except ManualAllocationsPresent as e:
            raise CommandError(
                f"{e.message} Re-run with --discard-manual to replace them."
            )

        self.stdout.write(
            self.style.SUCCESS(
                f"Reconciled {summary.vendors} vendor(s): "
                f"{summary.allocations_deleted} allocation(s) removed, "
                f"{summary.allocations_created} created, "
                f"{summary.payments_updated} payment status(es) changed."
            )
        )

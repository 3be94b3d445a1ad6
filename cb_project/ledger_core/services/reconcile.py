import logging
from collections import defaultdict
from dataclasses import dataclass

from django.db import transaction

from ..constants import FIFO, UNALLOCATED
from ..exceptions import ManualAllocationsPresent
from ..models import LedgerEntry, Payment, PaymentAllocation
from .audit_helper import log_action
from .fifo import FifoEntry, FifoPayment, fifo_match

logger = logging.getLogger(__name__)


@dataclass
class ReconcileSummary:
    vendors: int = 0
    allocations_created: int = 0
    allocations_deleted: int = 0
    manual_discarded: int = 0
    payments_updated: int = 0


def reconcile_allocations(*, discard_manual=False, user=None):
    """
    Rebuild every allocation from scratch, oldest-first, vendor by vendor.

    Existing rows are deleted and regenerated inside one transaction.
    Hand-placed (MANUAL) allocations are only discarded when the caller
    passes discard_manual=True; otherwise ManualAllocationsPresent is
    raised and nothing changes.
    """
    summary = ReconcileSummary()

    with transaction.atomic():
        # Lock every payment so no interactive allocation interleaves
        payments = list(
            Payment.objects.select_for_update().order_by("payment_date", "id")
        )

        manual_count = PaymentAllocation.objects.manual().count()
        if manual_count and not discard_manual:
            raise ManualAllocationsPresent(manual_count)
        if manual_count:
            logger.warning(
                "Reconciliation discards %s manual allocation(s)", manual_count)
        summary.manual_discarded = manual_count

        summary.allocations_deleted, _ = PaymentAllocation.objects.all().delete()

        # entries without a payee are never allocated
        entries = LedgerEntry.objects.payable().fifo_order()

        by_vendor = defaultdict(lambda: ([], []))
        for p in payments:
            by_vendor[p.vendor_id][0].append(
                FifoPayment(id=p.pk, payment_date=p.payment_date, amount=p.amount)
            )
        for e in entries:
            by_vendor[e.paid_to_vendor_id][1].append(
                FifoEntry(id=e.pk, entry_date=e.entry_date, total_amount=e.total_amount)
            )

        new_rows = []
        statuses = {}
        # each vendor is an independent unit of work
        for vendor_id in sorted(by_vendor):
            vendor_payments, vendor_entries = by_vendor[vendor_id]
            outcome = fifo_match(vendor_payments, vendor_entries)
            new_rows.extend(
                PaymentAllocation(
                    payment_id=a.payment_id,
                    entry_id=a.entry_id,
                    allocated_amount=a.amount,
                    source=FIFO,
                )
                for a in outcome.allocations
            )
            statuses.update(outcome.payment_status)
            summary.vendors += 1
            logger.debug(
                "Vendor %s: %s allocation(s), %s payment(s), %s entr(ies)",
                vendor_id,
                len(outcome.allocations),
                len(vendor_payments),
                len(vendor_entries),
            )

        PaymentAllocation.objects.bulk_create(new_rows)
        summary.allocations_created = len(new_rows)

        changed = []
        for p in payments:
            status = statuses.get(p.pk, UNALLOCATED)
            if p.allocation_status != status:
                p.allocation_status = status
                changed.append(p)
        # bulk_update skips save(); statuses come straight from the matcher
        Payment.objects.bulk_update(changed, ["allocation_status"])
        summary.payments_updated = len(changed)

        log_action(
            action="reconcile",
            user=user,
            object_type="PaymentAllocation",
            object_id="*",
            changes={
                "vendors": summary.vendors,
                "allocations_created": summary.allocations_created,
                "allocations_deleted": summary.allocations_deleted,
                "manual_discarded": summary.manual_discarded,
            },
        )

    logger.info(
        "Reconciliation complete: %s vendor(s), %s allocation(s) created",
        summary.vendors,
        summary.allocations_created,
    )
    return summary

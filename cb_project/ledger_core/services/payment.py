import logging

from django.db import transaction
from django.db.models import Sum

from ..constants import MANUAL, UNALLOCATED, ZERO
from ..exceptions import AllocatedRecordLocked, PaymentNotFound
from ..models import LedgerEntry, Payment, PaymentAllocation
from .allocation import (EntryBalance, PaymentBalance, parse_allocation_lines,
                         plan_payment_allocation)
from .audit_helper import log_action
from .validation import positive_decimal

logger = logging.getLogger(__name__)


# ----------------------------
# Payment-related workflows
# ----------------------------
def create_payment(
    *,
    vendor,
    payment_date,
    amount,
    payment_mode=None,
    reference_no=None,
    remarks=None,
    user=None,
):
    """Record money paid out to a vendor; it starts fully unallocated."""
    amount = positive_decimal(amount, "Amount")
    payment = Payment.objects.create(
        vendor=vendor,
        payment_date=payment_date,
        amount=amount,
        payment_mode=payment_mode or "BANK_TRANSFER",
        reference_no=reference_no,
        remarks=remarks,
        allocation_status=UNALLOCATED,
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )
    log_action(
        action="create",
        instance=payment,
        user=user,
        changes={"amount": str(payment.amount), "vendor_id": payment.vendor_id},
    )
    return payment


def _entry_balances(entries):
    """Snapshot each locked entry with its live allocated total."""
    paid = dict(
        PaymentAllocation.objects.filter(entry__in=entries)
        .values("entry_id")
        .annotate(total=Sum("allocated_amount"))
        .values_list("entry_id", "total")
    )
    return {
        e.pk: EntryBalance(
            id=e.pk,
            vendor_id=e.paid_to_vendor_id,
            total_amount=e.total_amount,
            allocated=paid.get(e.pk) or ZERO,
        )
        for e in entries
    }


def allocate_payment(payment_id, allocations, user=None):
    """
    Allocate part (or all) of one payment to operator-chosen ledger entries.

    `allocations` is a list of {"entry_id": ..., "amount": ...}.
    Returns the payment's new allocation_status.
    The batch is all or nothing: any violation raises an AllocationError
    inside the atomic block, so no allocation row and no status change
    survives.
    """
    # Request shape is checked before any row is read
    lines = parse_allocation_lines(allocations)

    with transaction.atomic():
        # Lock the payment row until the transaction finishes
        try:
            payment = Payment.objects.select_for_update().get(pk=payment_id)
        except Payment.DoesNotExist:
            raise PaymentNotFound(payment_id)

        # Lock the referenced entries in id order
        entry_ids = sorted({line.entry_id for line in lines})
        entries = list(
            LedgerEntry.objects.select_for_update()
            .filter(pk__in=entry_ids)
            .order_by("pk")
        )

        result = plan_payment_allocation(
            PaymentBalance(
                id=payment.pk,
                vendor_id=payment.vendor_id,
                amount=payment.amount,
                allocated=PaymentAllocation.objects.for_payment(payment.pk).total(),
            ),
            _entry_balances(entries),
            lines,
        )
        if not result.ok:
            logger.warning(
                "Rejected allocation for payment %s: %s",
                payment.pk,
                result.error.message,
            )
            # raising inside atomic() rolls back the whole batch
            raise result.error

        entries_by_id = {e.pk: e for e in entries}
        for planned in result.allocations:
            PaymentAllocation.objects.create(
                payment=payment,
                entry=entries_by_id[planned.entry_id],
                allocated_amount=planned.amount,
                source=MANUAL,
            )

        payment.allocation_status = result.status
        payment.save(update_fields=["allocation_status"])

        log_action(
            action="allocate",
            instance=payment,
            user=user,
            changes={
                "allocations": [
                    {"entry_id": a.entry_id, "amount": str(a.amount)}
                    for a in result.allocations
                ],
                "allocated_total": str(result.allocated_total),
                "status": result.status,
            },
        )

    logger.info(
        "Allocated %s line(s) of payment %s; status %s",
        len(result.allocations),
        payment.pk,
        result.status,
    )
    return result.status


def delete_payment(payment_id, user=None):
    """Delete a payment that has never been allocated."""
    with transaction.atomic():
        try:
            payment = Payment.objects.select_for_update().get(pk=payment_id)
        except Payment.DoesNotExist:
            raise PaymentNotFound(payment_id)

        if payment.has_allocations():
            raise AllocatedRecordLocked(
                "Cannot delete payment with allocations. Remove allocations first.",
                paymentId=payment.pk,
            )

        log_action(
            action="delete",
            instance=payment,
            user=user,
            changes={"amount": str(payment.amount), "vendor_id": payment.vendor_id},
        )
        payment.delete()

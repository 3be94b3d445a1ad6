import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from ..constants import MAX_QUANTITY
from ..exceptions import AllocatedRecordLocked, LedgerEntryNotFound
from ..models import LedgerEntry
from ..models.entry import FROZEN_WHEN_ALLOCATED
from .audit_helper import log_action
from .validation import positive_decimal

logger = logging.getLogger(__name__)

# Fields update_entry() accepts
EDITABLE_FIELDS = (
    "entry_date",
    "item",
    "source_vendor",
    "paid_to_vendor",
    "quantity",
    "unit",
    "total_amount",
    "remarks",
)


# ------------------------------------
# Ledger entry workflows
# ------------------------------------
def create_entry(
    *,
    item,
    entry_date,
    quantity,
    unit,
    total_amount,
    paid_to_vendor=None,
    source_vendor=None,
    remarks=None,
    user=None,
):
    """
    Book a material/service cost.
    total_amount is authoritative; rate is derived on save.
    """
    quantity = positive_decimal(quantity, "Quantity", MAX_QUANTITY)
    total_amount = positive_decimal(total_amount, "Total amount")
    if not unit:
        raise ValidationError("Unit is required")

    with transaction.atomic():
        entry = LedgerEntry.objects.create(
            item=item,
            entry_date=entry_date,
            quantity=quantity,
            unit=unit,
            total_amount=total_amount,
            paid_to_vendor=paid_to_vendor,
            # supplier defaults to the payee
            source_vendor=source_vendor or paid_to_vendor,
            remarks=remarks,
            created_by=user if getattr(user, "is_authenticated", False) else None,
        )
        log_action(
            action="create",
            instance=entry,
            user=user,
            changes={"total_amount": str(entry.total_amount)},
        )
    return entry


def update_entry(entry_id, user=None, **changes):
    """
    Edit an entry. Everything but remarks is frozen once the entry has
    allocations; quantity/total edits re-derive the rate.
    """
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Cannot update {sorted(unknown)} on an entry")

    with transaction.atomic():
        try:
            entry = LedgerEntry.objects.select_for_update().get(pk=entry_id)
        except LedgerEntry.DoesNotExist:
            raise LedgerEntryNotFound(entry_id)

        if "quantity" in changes:
            changes["quantity"] = positive_decimal(
                changes["quantity"], "Quantity", MAX_QUANTITY)
        if "total_amount" in changes:
            changes["total_amount"] = positive_decimal(
                changes["total_amount"], "Total amount")

        for name, value in changes.items():
            setattr(entry, name, value)
        # coerce strings (dates, amounts) before comparing with the stored row
        entry.clean_fields()

        if entry.has_allocations():
            orig = LedgerEntry.objects.get(pk=entry.pk)
            frozen = [
                f for f in FROZEN_WHEN_ALLOCATED
                if getattr(orig, f) != getattr(entry, f)
            ]
            if frozen:
                logger.warning(
                    "Refused edit of allocated entry %s: %s", entry.pk, frozen)
                raise AllocatedRecordLocked(
                    "Cannot modify an entry with existing payment allocations",
                    entryId=entry.pk,
                    fields=frozen,
                )

        entry.save()  # recomputes rate
        log_action(
            action="update",
            instance=entry,
            user=user,
            changes={k: str(v) for k, v in changes.items()},
        )
    return entry


def delete_entry(entry_id, user=None):
    with transaction.atomic():
        try:
            entry = LedgerEntry.objects.select_for_update().get(pk=entry_id)
        except LedgerEntry.DoesNotExist:
            raise LedgerEntryNotFound(entry_id)

        if entry.has_allocations():
            raise AllocatedRecordLocked(
                "Cannot delete entry with existing payment allocations",
                entryId=entry.pk,
            )

        log_action(
            action="delete",
            instance=entry,
            user=user,
            changes={"total_amount": str(entry.total_amount)},
        )
        entry.delete()

from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from ..constants import CENT, MAX_AMOUNT
from ..managers import LedgerEntryManager
from .item import Item
from .vendor import Vendor

# Fields that decide what an entry owes and to whom;
# frozen once any allocation points at the entry
FROZEN_WHEN_ALLOCATED = (
    "entry_date",
    "item_id",
    "source_vendor_id",
    "paid_to_vendor_id",
    "quantity",
    "unit",
    "total_amount",
)


def derive_rate(total_amount, quantity):
    """rate = total / quantity, a display value rounded to 2 places."""
    return (Decimal(total_amount) / Decimal(quantity)).quantize(
        CENT, rounding=ROUND_HALF_UP
    )


# ---------- Material / service ledger entries ----------
class LedgerEntry(models.Model):  # One incurred cost owed to a vendor

    entry_date = models.DateField()
    item = models.ForeignKey(
        Item,
        on_delete=models.PROTECT,  # keep items that label booked costs
        related_name="entries",
    )
    # Who supplied the material/service
    source_vendor = models.ForeignKey(
        Vendor,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="sourced_entries",
    )
    # Whose balance this entry counts against (grouping key for allocation)
    paid_to_vendor = models.ForeignKey(
        Vendor,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="paid_entries",
    )
    quantity = models.DecimalField(max_digits=10, decimal_places=2)
    unit = models.CharField(max_length=30)
    # Authoritative amount owed
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    # Derived from total_amount / quantity on every save
    rate = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, editable=False
    )
    remarks = models.TextField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="ledger_entries",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = LedgerEntryManager()

    class Meta:
        verbose_name_plural = "ledger entries"
        indexes = [
            models.Index(fields=["paid_to_vendor", "entry_date"], name="entry_vendor_date_idx"),
            models.Index(fields=["entry_date"], name="entry_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="entry_quantity_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(total_amount__gt=0),
                name="entry_total_positive",
            ),
        ]

    def __str__(self):
        return f"Entry {self.pk}: {self.item_id} {self.total_amount} on {self.entry_date}"

    def has_allocations(self):
        return self.pk is not None and self.allocations.exists()

    """How much has been matched to this entry so far (live sum)."""

    def paid_total(self):
        return self.allocations.total()

    def due_total(self):
        return self.total_amount - self.paid_total()

    def clean(self):
        # a failed clean_fields() leaves the raw input in place
        if not isinstance(self.quantity, Decimal) or self.quantity <= 0:
            raise ValidationError("Quantity must be greater than 0")
        if not isinstance(self.total_amount, Decimal) or self.total_amount <= 0:
            raise ValidationError("Total amount must be greater than 0")
        if not self.unit:
            raise ValidationError("Unit is required")

        # Allocated entries are immutable apart from remarks
        if self.has_allocations():
            orig = LedgerEntry.objects.get(pk=self.pk)
            changed_fields = [
                field
                for field in FROZEN_WHEN_ALLOCATED
                if getattr(orig, field) != getattr(self, field)
            ]
            if changed_fields:
                raise ValidationError(
                    f"Cannot modify {changed_fields} on an entry with payment allocations."
                )

        # rate is never taken from input
        self.rate = derive_rate(self.total_amount, self.quantity)
        if self.rate > MAX_AMOUNT:
            raise ValidationError("Rate (total / quantity) is too large")

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)

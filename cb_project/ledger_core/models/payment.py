from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from ..constants import (ALLOCATION_STATUS_CHOICES, PAYMENT_MODE_CHOICES,
                         UNALLOCATED)
from ..managers import PaymentManager
from .vendor import Vendor

FROZEN_WHEN_ALLOCATED = ("vendor_id", "payment_date", "amount")


# ---------- Payments made out to vendors ----------
class Payment(models.Model):

    vendor = models.ForeignKey(
        Vendor,
        # a vendor with payment history cannot be removed
        on_delete=models.PROTECT,
        related_name="payments",
    )
    payment_date = models.DateField()
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    payment_mode = models.CharField(
        max_length=20, choices=PAYMENT_MODE_CHOICES, default="BANK_TRANSFER"
    )
    reference_no = models.CharField(max_length=100, null=True, blank=True)
    remarks = models.TextField(null=True, blank=True)
    # Derived from the allocation rows, stored for listing/filtering
    allocation_status = models.CharField(
        max_length=20, choices=ALLOCATION_STATUS_CHOICES, default=UNALLOCATED
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="payments",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = PaymentManager()

    class Meta:
        indexes = [
            models.Index(fields=["vendor", "payment_date"], name="payment_vendor_date_idx"),
            models.Index(fields=["allocation_status"], name="payment_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="payment_amount_positive",
            ),
        ]

    def __str__(self):
        return f"{self.vendor} - {self.payment_date} - {self.amount} ({self.allocation_status})"

    def has_allocations(self):
        return self.pk is not None and self.allocations.exists()

    """How much of this payment has been matched to entries (live sum)."""

    def allocated_total(self):
        return self.allocations.total()

    def remaining_total(self):
        return self.amount - self.allocated_total()

    def clean(self):
        # a failed clean_fields() leaves the raw input in place
        if not isinstance(self.amount, Decimal) or self.amount <= 0:
            raise ValidationError("Amount must be positive")

        if self.has_allocations():
            orig = Payment.objects.get(pk=self.pk)
            changed_fields = [
                field
                for field in FROZEN_WHEN_ALLOCATED
                if getattr(orig, field) != getattr(self, field)
            ]
            if changed_fields:
                raise ValidationError(
                    f"Cannot modify {changed_fields} on a payment with allocations."
                )

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)

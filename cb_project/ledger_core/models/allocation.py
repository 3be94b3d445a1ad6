from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from ..constants import ALLOCATION_SOURCE_CHOICES, MANUAL
from ..managers import PaymentAllocationManager
from .entry import LedgerEntry
from .payment import Payment


class PaymentAllocation(
    models.Model
):  # Bridge row: X amount of this payment settles this ledger entry

    payment = models.ForeignKey(
        Payment, on_delete=models.CASCADE, related_name="allocations"
    )
    entry = models.ForeignKey(
        LedgerEntry, on_delete=models.CASCADE, related_name="allocations"
    )
    # Fixed once created; rows are only ever removed by reconciliation
    allocated_amount = models.DecimalField(max_digits=12, decimal_places=2)
    # MANUAL (operator picked the entry) or FIFO (reconciliation pass)
    source = models.CharField(
        max_length=10, choices=ALLOCATION_SOURCE_CHOICES, default=MANUAL
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = PaymentAllocationManager()

    class Meta:
        indexes = [
            models.Index(fields=["payment"], name="allocation_payment_idx"),
            models.Index(fields=["entry"], name="allocation_entry_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(allocated_amount__gt=0),
                name="allocation_amount_positive",
            ),
        ]

    def __str__(self):
        return f"Payment {self.payment_id} → Entry {self.entry_id} Amt: ({self.allocated_amount})"

    def clean(self):
        if not isinstance(self.allocated_amount, Decimal) or self.allocated_amount <= 0:
            raise ValidationError("Allocated amount must be positive")

        """ A payment to vendor A can never settle an entry owed to vendor B """
        if self.entry.paid_to_vendor_id != self.payment.vendor_id:
            raise ValidationError(
                "Entry and payment must belong to the same vendor")

        # Conservation on both sides; other rows exclude this one
        others = PaymentAllocation.objects.exclude(pk=self.pk)
        payment_used = others.for_payment(self.payment_id).total()
        if payment_used + self.allocated_amount > self.payment.amount:
            raise ValidationError(
                "Allocated amounts exceed payment amount")
        entry_paid = others.for_entry(self.entry_id).total()
        entry_due = self.entry.total_amount - entry_paid
        if self.allocated_amount > entry_due:
            raise ValidationError(
                "Allocated amount cannot exceed entry due amount")

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)

from decimal import Decimal

from django.db import models
from django.db.models import ExpressionWrapper, F, Sum
from django.db.models.functions import Coalesce

from .constants import CENT, MANUAL

# Output field for every money annotation (2 places, same as the columns)
MONEY = models.DecimalField(max_digits=14, decimal_places=2)


def _money_sum(path):
    return Coalesce(Sum(path), Decimal("0.00"), output_field=MONEY)


# -----------------------------------------
# Ledger entry store
# -----------------------------------------
class LedgerEntryQuerySet(models.QuerySet):
    def for_vendor(self, vendor_id):
        # ledger entries count against whoever they are paid to
        return self.filter(paid_to_vendor_id=vendor_id)

    def payable(self):
        # entries with no payee can never be allocated
        return self.filter(paid_to_vendor__isnull=False)

    def fifo_order(self):
        # id breaks ties between entries booked on the same day
        return self.order_by("entry_date", "id")

    def with_settlement(self):
        """Annotate live paid_amount / due_amount from the allocation rows."""
        return self.annotate(
            paid_amount=_money_sum("allocations__allocated_amount"),
        ).annotate(
            due_amount=ExpressionWrapper(
                F("total_amount") - F("paid_amount"), output_field=MONEY
            )
        )

    def outstanding(self):
        return self.with_settlement().filter(due_amount__gt=0)


class LedgerEntryManager(models.Manager.from_queryset(LedgerEntryQuerySet)):
    pass


# -----------------------------------------
# Payment store
# -----------------------------------------
class PaymentQuerySet(models.QuerySet):
    def for_vendor(self, vendor_id):
        return self.filter(vendor_id=vendor_id)

    def fifo_order(self):
        return self.order_by("payment_date", "id")

    def with_allocation(self):
        """Annotate live allocated_amount / remaining_amount."""
        return self.annotate(
            allocated_amount=_money_sum("allocations__allocated_amount"),
        ).annotate(
            remaining_amount=ExpressionWrapper(
                F("amount") - F("allocated_amount"), output_field=MONEY
            )
        )

    def with_advance(self):
        # payments that still carry an unallocated (advance) remainder
        return self.with_allocation().filter(remaining_amount__gt=0)


class PaymentManager(models.Manager.from_queryset(PaymentQuerySet)):
    pass


# -----------------------------------------
# Allocation store
# -----------------------------------------
class PaymentAllocationQuerySet(models.QuerySet):
    def for_payment(self, payment_id):
        return self.filter(payment_id=payment_id)

    def for_entry(self, entry_id):
        return self.filter(entry_id=entry_id)

    def for_vendor(self, vendor_id):
        return self.filter(payment__vendor_id=vendor_id)

    def manual(self):
        return self.filter(source=MANUAL)

    def total(self):
        """Sum of allocated_amount over this queryset (0.00 when empty)."""
        total = self.aggregate(total=_money_sum("allocated_amount"))["total"]
        # SQLite hands SUM back as a float
        return total.quantize(CENT)


class PaymentAllocationManager(
    models.Manager.from_queryset(PaymentAllocationQuerySet)
):
    pass

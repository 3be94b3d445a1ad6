"""
Read-only figures for the dashboard and vendor ledger.

Paid/due/advance always come from the live allocation rows; nothing here
reads Payment.allocation_status or writes to the database.
"""
from decimal import Decimal

from django.db.models import Avg, Count, Sum

from ..constants import ZERO
from ..managers import MONEY
from ..models import LedgerEntry, Payment, PaymentAllocation, Vendor


def _money(value):
    return (value or ZERO).quantize(Decimal("0.01"))


def dashboard_totals():
    """
    total_project_cost  sum of every entry's total_amount
    total_paid          sum of allocations (not of payment amounts)
    total_due           sum of positive entry dues
    total_advance       sum of positive payment remainders
    """
    total_cost = LedgerEntry.objects.aggregate(
        total=Sum("total_amount", output_field=MONEY))["total"]
    total_paid = PaymentAllocation.objects.all().total()

    total_due = sum(
        LedgerEntry.objects.outstanding().values_list("due_amount", flat=True),
        ZERO,
    )
    total_advance = sum(
        Payment.objects.with_advance().values_list("remaining_amount", flat=True),
        ZERO,
    )
    return {
        "total_project_cost": _money(total_cost),
        "total_paid": _money(total_paid),
        "total_due": _money(total_due),
        "total_advance": _money(total_advance),
    }


def vendor_ledger():
    """
    Per-vendor exposure, ranked by outstanding due (largest first).
    """
    rows = {
        v.pk: {
            "vendor_id": v.pk,
            "vendor_name": v.name,
            "total_material_cost": ZERO,
            "total_payments": ZERO,
            "total_paid": ZERO,
            "total_due": ZERO,
            "total_advance": ZERO,
        }
        for v in Vendor.objects.all()
    }

    # separate passes keep the per-row sums free of join fan-out
    entries = (
        LedgerEntry.objects.payable()
        .with_settlement()
        .values_list("paid_to_vendor_id", "total_amount", "paid_amount", "due_amount")
    )
    for vendor_id, total, paid, due in entries:
        row = rows[vendor_id]
        row["total_material_cost"] += total
        row["total_paid"] += paid
        if due > ZERO:
            row["total_due"] += due

    payments = Payment.objects.with_allocation().values_list(
        "vendor_id", "amount", "remaining_amount")
    for vendor_id, amount, remaining in payments:
        row = rows[vendor_id]
        row["total_payments"] += amount
        if remaining > ZERO:
            row["total_advance"] += remaining

    result = []
    for row in rows.values():
        result.append({k: (_money(v) if isinstance(v, Decimal) else v)
                       for k, v in row.items()})
    result.sort(key=lambda r: (-r["total_due"], r["vendor_name"]))
    return result


def date_wise_expenses(start_date=None, end_date=None):
    """Expense total and entry count per entry date, newest first."""
    qs = LedgerEntry.objects.all()
    if start_date:
        qs = qs.filter(entry_date__gte=start_date)
    if end_date:
        qs = qs.filter(entry_date__lte=end_date)
    rows = (
        qs.values("entry_date")
        .annotate(total_expense=Sum("total_amount"), entry_count=Count("id"))
        .order_by("-entry_date")
    )
    return [
        {
            "entry_date": r["entry_date"],
            "total_expense": _money(r["total_expense"]),
            "entry_count": r["entry_count"],
        }
        for r in rows
    ]


def item_wise_report():
    """Quantity, cost and average rate per item, costliest first."""
    rows = (
        LedgerEntry.objects.values("item_id", "item__name", "item__unit")
        .annotate(
            total_quantity=Sum("quantity"),
            total_cost=Sum("total_amount"),
            avg_rate=Avg("rate"),
        )
        .order_by("-total_cost", "item__name")
    )
    return [
        {
            "item_id": r["item_id"],
            "item_name": r["item__name"],
            "unit": r["item__unit"],
            "total_quantity": _money(r["total_quantity"]),
            "total_cost": _money(r["total_cost"]),
            # some backends hand back a float for AVG
            "avg_rate": _money(Decimal(str(r["avg_rate"] or 0))),
        }
        for r in rows
    ]

from django.contrib import admin

from ledger_core.models import PaymentAllocation

# ---------- Helpful inline admin classes ----------


class PaymentAllocationInline(admin.TabularInline):
    """Show allocation rows (read-only) under a payment or an entry."""

    model = PaymentAllocation
    extra = 0  # don’t show “empty” rows by default
    fields = ("payment", "entry", "allocated_amount", "source", "created_at")
    # allocation rows are written by the engine only
    readonly_fields = fields
    can_delete = False
    show_change_link = True
    ordering = ("id",)

    def has_add_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("payment", "entry")

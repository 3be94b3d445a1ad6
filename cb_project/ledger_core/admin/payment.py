from django.contrib import admin

from ledger_core.models import Payment, PaymentAllocation
from ledger_core.models.payment import FROZEN_WHEN_ALLOCATED

from .actions import reconcile_fifo, reconcile_fifo_discard_manual
from .inlines import PaymentAllocationInline
from .ReadOnly import ReadOnlyAdmin


# Register `Payment` model
@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "vendor",
        "payment_date",
        "amount",
        "payment_mode",
        "reference_no",
        "allocation_status",
    )
    list_filter = ("allocation_status", "payment_mode", "payment_date")
    search_fields = ("reference_no", "remarks", "vendor__name")
    # status is derived by the allocation engine
    readonly_fields = ("allocation_status",)
    actions = [reconcile_fifo, reconcile_fifo_discard_manual]
    inlines = [PaymentAllocationInline]

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("vendor")

    def get_readonly_fields(self, request, obj=None):
        if obj and obj.has_allocations():
            frozen = [f.removesuffix("_id") for f in FROZEN_WHEN_ALLOCATED]
            return ["allocation_status", *frozen]
        return super().get_readonly_fields(request, obj)

    def has_delete_permission(self, request, obj=None):
        if obj and obj.has_allocations():
            return False
        return super().has_delete_permission(request, obj)

    def save_model(self, request, obj, form, change):
        if not change and request.user.is_authenticated:
            obj.created_by = request.user
        super().save_model(request, obj, form, change)


# Register `PaymentAllocation` model (written by the engine only)
@admin.register(PaymentAllocation)
class PaymentAllocationAdmin(ReadOnlyAdmin):
    list_display = ("id", "payment", "entry", "allocated_amount", "source", "created_at")
    list_filter = ("source", "created_at")
    search_fields = ("payment__vendor__name",)

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("payment__vendor", "entry")

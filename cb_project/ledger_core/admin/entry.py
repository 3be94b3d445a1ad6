from django.contrib import admin

from ledger_core.models import LedgerEntry, Vendor
from ledger_core.models.entry import FROZEN_WHEN_ALLOCATED

from .inlines import PaymentAllocationInline


# Register `LedgerEntry` model
@admin.register(LedgerEntry)
class LedgerEntryAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "entry_date",
        "item",
        "source_vendor",
        "paid_to_vendor",
        "quantity",
        "unit",
        "rate",
        "total_amount",
    )
    list_filter = ("entry_date", "item__item_type", "paid_to_vendor")
    search_fields = ("remarks", "item__name", "paid_to_vendor__name")
    readonly_fields = ("rate",)
    inlines = [PaymentAllocationInline]

    # Fetch everything in one SQL join
    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("item", "source_vendor", "paid_to_vendor")

    """ Enforce immutability at admin level """

    def get_readonly_fields(self, request, obj=None):
        # allocated entries keep only remarks editable
        if obj and obj.has_allocations():
            frozen = [f.removesuffix("_id") for f in FROZEN_WHEN_ALLOCATED]
            return ["rate", *frozen]
        return super().get_readonly_fields(request, obj)

    def has_delete_permission(self, request, obj=None):
        if obj and obj.has_allocations():
            return False  # removes “Delete” option for allocated entries
        return super().has_delete_permission(request, obj)

    def save_model(self, request, obj, form, change):
        if not change and request.user.is_authenticated:
            obj.created_by = request.user
        # supplier defaults to the payee
        if obj.source_vendor_id is None:
            obj.source_vendor_id = obj.paid_to_vendor_id
        super().save_model(request, obj, form, change)


# Register `Vendor` model
@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "normalized_name", "contact_details", "tax_id")
    search_fields = ("name", "normalized_name", "tax_id")

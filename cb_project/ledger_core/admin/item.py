from django.contrib import admin

from ledger_core.models import Item


# Register `Item` model
@admin.register(Item)
class ItemAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "item_type", "unit", "category")
    list_filter = ("item_type", "category")
    search_fields = ("name", "normalized_name", "category")

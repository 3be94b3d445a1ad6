from django.contrib import admin

from ledger_core.models import AuditLog

from .ReadOnly import ReadOnlyAdmin


# Register `AuditLog` model
@admin.register(AuditLog)
class AuditLogAdmin(ReadOnlyAdmin):
    list_display = ("created_at", "action", "object_type", "object_id", "user")
    list_filter = ("action", "object_type")
    search_fields = ("object_id", "user__username")
    date_hierarchy = "created_at"

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("user")

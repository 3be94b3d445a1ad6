from django.contrib import admin

from ledger_core.models import DailyWorkLog, WorkMedia


class WorkMediaInline(admin.TabularInline):
    model = WorkMedia
    extra = 1
    fields = ("media_type", "drive_url", "caption")


@admin.register(DailyWorkLog)
class DailyWorkLogAdmin(admin.ModelAdmin):
    list_display = ("work_date", "short_description", "media_count", "created_by", "created_at")
    list_filter = ("work_date",)
    search_fields = ("description",)
    date_hierarchy = "work_date"
    readonly_fields = ("created_by", "created_at")
    inlines = [WorkMediaInline]

    @admin.display(description="Description")
    def short_description(self, obj):
        return obj.description[:60]

    @admin.display(description="Media")
    def media_count(self, obj):
        return obj.media.count()

    def save_model(self, request, obj, form, change):
        if not change and request.user.is_authenticated:
            obj.created_by = request.user
        super().save_model(request, obj, form, change)

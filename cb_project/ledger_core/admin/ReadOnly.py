from django.contrib import admin


class ReadOnlyAdmin(admin.ModelAdmin):
    """
    View-only admin for rows that only the allocation engine and the
    audit helper write (allocations, audit entries).
    """

    list_per_page = 50

    def has_add_permission(self, request):
        return False

    # view permission alone renders the change form read-only
    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    # no delete_selected either
    def get_actions(self, request):
        return {}

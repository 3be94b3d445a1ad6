from django.urls import path

from . import views

app_name = "ledger_core"

urlpatterns = [
    path("entries/", views.entry_list, name="entry-list"),
    path("entries/<int:entry_id>/", views.entry_detail, name="entry-detail"),
    path("entries/<int:entry_id>/delete/", views.delete_entry_view, name="entry-delete"),
    path("payments/", views.payment_list, name="payment-list"),
    path("payments/<int:payment_id>/", views.payment_detail, name="payment-detail"),
    path(
        "payments/<int:payment_id>/allocate/",
        views.allocate_payment_view,
        name="payment-allocate",
    ),
    path(
        "payments/<int:payment_id>/delete/",
        views.delete_payment_view,
        name="payment-delete",
    ),
    path("dashboard/", views.dashboard_view, name="dashboard"),
    path("vendors/ledger/", views.vendor_ledger_view, name="vendor-ledger"),
    path("reports/date-wise/", views.date_wise_report, name="report-date-wise"),
    path("reports/items/", views.item_wise_report_view, name="report-items"),
    path("work-logs/", views.work_logs, name="work-logs"),
]

from django.contrib import admin, messages
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from ledger_core.services import reconcile_allocations

# ---------- Admin actions ----------


def _run_reconcile(modeladmin, request, discard_manual):
    """
    Reconciliation always spans every vendor, whatever rows were selected.
    Reports the outcome (or the refusal) via admin messages.
    """
    try:
        summary = reconcile_allocations(
            discard_manual=discard_manual, user=request.user)
    except ValidationError as exc:
        modeladmin.message_user(
            request,
            _("Reconciliation not run: %(err)s") % {"err": "; ".join(exc.messages)},
            level=messages.ERROR,
        )
        return

    modeladmin.message_user(
        request,
        _("Reconciled %(vendors)d vendor(s): %(created)d allocation(s) created, "
          "%(discarded)d manual allocation(s) discarded.") % {
            "vendors": summary.vendors,
            "created": summary.allocations_created,
            "discarded": summary.manual_discarded,
        },
        level=messages.SUCCESS,
    )


@admin.action(description="Rebuild all allocations oldest-first (keep if manual ones exist)")
def reconcile_fifo(modeladmin, request, queryset):
    _run_reconcile(modeladmin, request, discard_manual=False)


@admin.action(description="Rebuild all allocations oldest-first (discard manual ones)")
def reconcile_fifo_discard_manual(modeladmin, request, queryset):
    _run_reconcile(modeladmin, request, discard_manual=True)

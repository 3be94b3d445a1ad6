import json

from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import (require_GET, require_http_methods,
                                          require_POST)

from .constants import CENT
from .exceptions import AllocationError, LedgerEntryNotFound, PaymentNotFound
from .models import LedgerEntry, Payment
from .services import (allocate_payment, create_work_log, dashboard_totals,
                       date_wise_expenses, delete_entry, delete_payment,
                       item_wise_report, list_work_logs, vendor_ledger)


def _error_response(exc):
    return JsonResponse(exc.as_payload(), status=exc.status_code)


def _money_rows(rows, fields):
    """Quantize annotated amounts; some backends return them unscaled."""
    rows = list(rows)
    for row in rows:
        for key in fields:
            if row[key] is not None:
                row[key] = row[key].quantize(CENT)
    return rows


def _date_filters(request, field, qs):
    start = request.GET.get("start_date")
    end = request.GET.get("end_date")
    if start:
        qs = qs.filter(**{f"{field}__gte": start})
    if end:
        qs = qs.filter(**{f"{field}__lte": end})
    return qs


def _read_json(request):
    """Parsed JSON object body, or an error response."""
    try:
        body = json.loads(request.body or b"{}")
    except (ValueError, UnicodeDecodeError):
        return None, JsonResponse({"message": "Request body must be JSON"}, status=400)
    if not isinstance(body, dict):
        return None, JsonResponse({"message": "Request body must be an object"}, status=400)
    return body, None


@csrf_exempt
@require_POST
def allocate_payment_view(request, payment_id):
    """
    Body: {"allocations": [{"entry_id": 1, "amount": "100.00"}, ...]}
    200 → {"message", "status"}; 400/404 → structured error payload.
    """
    body, error = _read_json(request)
    if error is not None:
        return error

    try:
        status = allocate_payment(
            payment_id, body.get("allocations"), user=request.user)
    except AllocationError as e:
        return _error_response(e)
    return JsonResponse({"message": "Allocation successful", "status": status})


@csrf_exempt
@require_POST
def delete_payment_view(request, payment_id):
    try:
        delete_payment(payment_id, user=request.user)
    except AllocationError as e:
        return _error_response(e)
    return JsonResponse({"message": "Payment deleted"})


@csrf_exempt
@require_POST
def delete_entry_view(request, entry_id):
    try:
        delete_entry(entry_id, user=request.user)
    except AllocationError as e:
        return _error_response(e)
    return JsonResponse({"message": "Entry deleted successfully"})


@require_GET
def entry_list(request):
    """Ledger entries with live paid_amount / due_amount, newest first."""
    qs = LedgerEntry.objects.with_settlement()
    if request.GET.get("vendor_id"):
        qs = qs.for_vendor(request.GET["vendor_id"])
    if request.GET.get("item_id"):
        qs = qs.filter(item_id=request.GET["item_id"])
    qs = _date_filters(request, "entry_date", qs)
    data = _money_rows(
        qs.order_by("-entry_date", "-created_at").values(
            "id",
            "entry_date",
            "item_id",
            "item__name",
            "source_vendor_id",
            "paid_to_vendor_id",
            "paid_to_vendor__name",
            "quantity",
            "unit",
            "rate",
            "total_amount",
            "paid_amount",
            "due_amount",
            "remarks",
        ),
        ("paid_amount", "due_amount"),
    )
    return JsonResponse(data, safe=False)


@require_GET
def payment_list(request):
    """Payments with live allocated_amount / remaining_amount."""
    qs = Payment.objects.with_allocation()
    if request.GET.get("vendor_id"):
        qs = qs.for_vendor(request.GET["vendor_id"])
    if request.GET.get("allocation_status"):
        qs = qs.filter(allocation_status=request.GET["allocation_status"])
    qs = _date_filters(request, "payment_date", qs)
    data = _money_rows(
        qs.order_by("-payment_date", "-created_at").values(
            "id",
            "vendor_id",
            "vendor__name",
            "payment_date",
            "amount",
            "payment_mode",
            "reference_no",
            "allocation_status",
            "allocated_amount",
            "remaining_amount",
        ),
        ("allocated_amount", "remaining_amount"),
    )
    return JsonResponse(data, safe=False)


@require_GET
def dashboard_view(request):
    return JsonResponse(dashboard_totals())


@require_GET
def vendor_ledger_view(request):
    return JsonResponse(vendor_ledger(), safe=False)


@require_GET
def entry_detail(request, entry_id):
    """One entry with its item, both vendors and live paid / due."""
    entry = (
        LedgerEntry.objects.with_settlement()
        .select_related("item", "source_vendor", "paid_to_vendor")
        .filter(pk=entry_id)
        .first()
    )
    if entry is None:
        return _error_response(LedgerEntryNotFound(entry_id))

    return JsonResponse({
        "id": entry.pk,
        "entry_date": entry.entry_date,
        "item": {"id": entry.item_id, "name": entry.item.name, "unit": entry.item.unit},
        "source_vendor": (
            {"id": entry.source_vendor_id, "name": entry.source_vendor.name}
            if entry.source_vendor_id else None
        ),
        "paid_to_vendor": {"id": entry.paid_to_vendor_id, "name": entry.paid_to_vendor.name},
        "quantity": entry.quantity,
        "unit": entry.unit,
        "rate": entry.rate,
        "total_amount": entry.total_amount,
        "paid_amount": entry.paid_amount.quantize(CENT),
        "due_amount": entry.due_amount.quantize(CENT),
        "remarks": entry.remarks,
    })


@require_GET
def payment_detail(request, payment_id):
    """One payment with the entries it settles."""
    payment = (
        Payment.objects.with_allocation()
        .select_related("vendor")
        .filter(pk=payment_id)
        .first()
    )
    if payment is None:
        return _error_response(PaymentNotFound(payment_id))

    allocations = payment.allocations.select_related(
        "entry", "entry__source_vendor").order_by("id")
    return JsonResponse({
        "id": payment.pk,
        "vendor_id": payment.vendor_id,
        "vendor_name": payment.vendor.name,
        "payment_date": payment.payment_date,
        "amount": payment.amount,
        "payment_mode": payment.payment_mode,
        "reference_no": payment.reference_no,
        "remarks": payment.remarks,
        "allocation_status": payment.allocation_status,
        "allocated_amount": payment.allocated_amount.quantize(CENT),
        "remaining_amount": payment.remaining_amount.quantize(CENT),
        "allocations": [
            {
                "id": a.pk,
                "entry_id": a.entry_id,
                "allocated_amount": a.allocated_amount,
                "source": a.source,
                "entry_date": a.entry.entry_date,
                "total_amount": a.entry.total_amount,
                "remarks": a.entry.remarks,
                "item_id": a.entry.item_id,
                "source_vendor_name": (
                    a.entry.source_vendor.name if a.entry.source_vendor_id else None
                ),
            }
            for a in allocations
        ],
    })


@require_GET
def date_wise_report(request):
    return JsonResponse(
        date_wise_expenses(
            request.GET.get("start_date"), request.GET.get("end_date")),
        safe=False,
    )


@require_GET
def item_wise_report_view(request):
    return JsonResponse(item_wise_report(), safe=False)


def _work_log_row(log):
    return {
        "id": log.pk,
        "work_date": log.work_date,
        "description": log.description,
        "created_by": log.created_by_id,
        "created_at": log.created_at,
        "media": [
            {
                "id": m.pk,
                "media_type": m.media_type,
                "drive_url": m.drive_url,
                "caption": m.caption,
            }
            for m in log.media.all()
        ],
    }


@csrf_exempt
@require_http_methods(["GET", "POST"])
def work_logs(request):
    """
    GET  → site diary, newest first (?start_date / ?end_date)
    POST → {"work_date", "description", "media": [{"media_type", "drive_url", "caption"}]}
    """
    if request.method == "GET":
        logs = list_work_logs(
            request.GET.get("start_date"), request.GET.get("end_date"))
        return JsonResponse([_work_log_row(log) for log in logs], safe=False)

    body, error = _read_json(request)
    if error is not None:
        return error
    try:
        log = create_work_log(
            work_date=body.get("work_date"),
            description=body.get("description"),
            media=body.get("media"),
            user=request.user,
        )
    except ValidationError as e:
        return JsonResponse({"message": "; ".join(e.messages)}, status=400)
    # re-read so the response carries the saved media rows
    log = list_work_logs().get(pk=log.pk)
    return JsonResponse(_work_log_row(log), status=201)

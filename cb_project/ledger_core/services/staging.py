"""
Staged spreadsheet import.

An import workbook carries a `vendors_master` sheet (code, name) and a
`payments` sheet (payment_date, paid_to_vendor_code, amount, payment_mode,
reference, remarks). Staged payments are matched to existing Payment rows
by (payment_date, vendor, amount); matches get their descriptive fields
refreshed and surplus staged rows are created. Rows that cannot be resolved
are logged and skipped, never fatal.
"""
import datetime
import logging
import re
from collections import defaultdict
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import transaction
from django.utils.dateparse import parse_date
from openpyxl import load_workbook

from ..constants import CENT, MAX_AMOUNT, UNALLOCATED
from ..models import Payment, Vendor
from .audit_helper import log_action

logger = logging.getLogger(__name__)

VENDOR_SHEET = "vendors_master"
PAYMENT_SHEET = "payments"

# Excel day 0 for serial dates
EXCEL_EPOCH = datetime.date(1899, 12, 30)

_BANK_WORDS = ("NEFT", "IMPS", "RTGS", "BANK", "ONLINE", "TRANSFER")
_UPI_WORDS = ("UPI", "GPAY", "GOOGLE", "PHONE", "PAYTM")


@dataclass
class StagingSummary:
    updated: int = 0
    created: int = 0
    skipped: int = 0
    unresolved_vendors: int = 0


def compact_key(name):
    """Alphanumerics only, lowercase: "M/s. Sharma & Sons" → "mssharmasons"."""
    return re.sub(r"[^a-z0-9]", "", str(name or "").lower())


def map_payment_mode(raw):
    if raw is None or not str(raw).strip():
        return "CASH"
    mode = str(raw).strip().upper()
    if any(word in mode for word in _BANK_WORDS):
        return "BANK_TRANSFER"
    if any(word in mode for word in _UPI_WORDS):
        return "UPI"
    if "CASH" in mode:
        return "CASH"
    if "CHEQUE" in mode or "CHECK" in mode:
        return "CHEQUE"
    return "OTHER"


def coerce_date(value):
    """Accept datetime/date cells, Excel serial numbers and text dates."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return EXCEL_EPOCH + datetime.timedelta(days=int(value))
    text = str(value or "").strip()
    if not text:
        return None
    parsed = parse_date(text)
    if parsed:
        return parsed
    for fmt in ("%d-%m-%Y", "%d/%m/%Y", "%d.%m.%Y"):
        try:
            return datetime.datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def coerce_amount(value):
    try:
        amount = Decimal(str(value).replace(",", "").strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount > MAX_AMOUNT:
        return None
    amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    return amount if amount > 0 else None


def load_staging_workbook(path):
    """Read both staging sheets into lists of dicts keyed by the header row."""
    wb = load_workbook(filename=path, read_only=True, data_only=True)
    try:
        sheets = {}
        for name in (VENDOR_SHEET, PAYMENT_SHEET):
            if name not in wb.sheetnames:
                raise ValueError(f"Workbook has no '{name}' sheet")
            rows = wb[name].iter_rows(values_only=True)
            header = next(rows, None) or ()
            keys = [str(h).strip() if h is not None else "" for h in header]
            sheets[name] = [
                dict(zip(keys, row))
                for row in rows
                if row and any(cell is not None for cell in row)
            ]
        return sheets[VENDOR_SHEET], sheets[PAYMENT_SHEET]
    finally:
        wb.close()


def resolve_vendor_codes(vendor_rows, summary):
    """Map staged vendor codes to Vendor ids by compact name."""
    known = {compact_key(v.name): v.pk for v in Vendor.objects.all()}
    code_map = {}
    for row in vendor_rows:
        code, name = row.get("code"), row.get("name")
        vendor_id = known.get(compact_key(name))
        if vendor_id is None:
            summary.unresolved_vendors += 1
            logger.warning(
                "Vendor %s (%s) not found in database; skipping its payments",
                name, code)
            continue
        code_map[code] = vendor_id
    return code_map


def sync_staged_payments(vendor_rows, payment_rows, user=None):
    """Upsert staged payments into the Payment table. Returns StagingSummary."""
    summary = StagingSummary()

    with transaction.atomic():
        code_map = resolve_vendor_codes(vendor_rows, summary)

        staged_groups = defaultdict(list)
        for row in payment_rows:
            vendor_id = code_map.get(row.get("paid_to_vendor_code"))
            if vendor_id is None:
                summary.skipped += 1
                continue
            payment_date = coerce_date(row.get("payment_date"))
            amount = coerce_amount(row.get("amount"))
            if payment_date is None or amount is None:
                summary.skipped += 1
                logger.warning("Skipping staged payment with bad date/amount: %r", row)
                continue
            staged_groups[(payment_date, vendor_id, amount)].append(
                {
                    "payment_mode": map_payment_mode(row.get("payment_mode")),
                    "reference_no": str(row.get("reference") or "")[:100],
                    "remarks": str(row.get("remarks") or ""),
                }
            )

        db_groups = defaultdict(list)
        for p in Payment.objects.select_for_update().order_by("id"):
            db_groups[(p.payment_date, p.vendor_id, p.amount)].append(p)

        for key, staged in staged_groups.items():
            existing = db_groups.get(key, [])
            # pair staged and stored rows positionally within a group
            for staged_row, payment in zip(staged, existing):
                for field, value in staged_row.items():
                    setattr(payment, field, value)
                payment.save(update_fields=list(staged_row))
                summary.updated += 1

            payment_date, vendor_id, amount = key
            for staged_row in staged[len(existing):]:
                Payment.objects.create(
                    vendor_id=vendor_id,
                    payment_date=payment_date,
                    amount=amount,
                    allocation_status=UNALLOCATED,
                    **staged_row,
                )
                summary.created += 1

        log_action(
            action="import",
            user=user,
            object_type="Payment",
            object_id="*",
            changes={
                "updated": summary.updated,
                "created": summary.created,
                "skipped": summary.skipped,
                "unresolved_vendors": summary.unresolved_vendors,
            },
        )

    logger.info(
        "Staged payments synced: %s updated, %s created, %s skipped",
        summary.updated, summary.created, summary.skipped)
    return summary

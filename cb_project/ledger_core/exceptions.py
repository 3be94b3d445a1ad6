from django.core.exceptions import ValidationError


class AllocationError(ValidationError):
    """
    Base class for every rejected allocation-affecting operation.
    Subclasses ValidationError so existing `except ValidationError`
    handlers (admin actions, forms, views) keep catching them.
    """

    status_code = 400
    code = "allocation_error"

    def __init__(self, message, **detail):
        super().__init__(message, code=self.code)
        self.detail = detail

    def as_payload(self):
        """Structured body returned to API callers."""
        payload = {"message": self.message}
        payload.update(self.detail)
        return payload


class InvalidAllocationRequest(AllocationError):
    """Bad request shape: empty list, missing ids, non-positive amounts."""

    code = "invalid_request"


class PaymentNotFound(AllocationError):
    status_code = 404
    code = "payment_not_found"

    def __init__(self, payment_id):
        super().__init__("Payment not found", paymentId=payment_id)


class LedgerEntryNotFound(AllocationError):
    status_code = 404
    code = "entry_not_found"

    def __init__(self, entry_id):
        super().__init__(f"Entry {entry_id} not found", entryId=entry_id)


class VendorMismatch(AllocationError):
    code = "vendor_mismatch"

    def __init__(self, entry_id, entry_vendor_id, payment_vendor_id):
        super().__init__(
            f"Entry {entry_id} belongs to a different vendor",
            entryId=entry_id,
            entryVendorId=entry_vendor_id,
            paymentVendorId=payment_vendor_id,
        )


class PaymentOverAllocated(AllocationError):
    code = "payment_over_allocated"

    def __init__(self, current_allocated, requested_total, payment_amount):
        super().__init__(
            "Allocation exceeds payment amount",
            currentAllocated=str(current_allocated),
            requestedTotal=str(requested_total),
            paymentAmount=str(payment_amount),
        )


class EntryOverAllocated(AllocationError):
    code = "entry_over_allocated"

    def __init__(self, entry_id, requested, due):
        super().__init__(
            f"Allocation {requested} exceeds due amount {due} for entry {entry_id}",
            entryId=entry_id,
            requested=str(requested),
            dueAmount=str(due),
        )


class AllocatedRecordLocked(AllocationError):
    """Edit or delete attempted on an entry/payment that has allocations."""

    code = "allocated_record_locked"


class ManualAllocationsPresent(AllocationError):
    """Reconciliation would silently discard hand-placed allocations."""

    code = "manual_allocations_present"

    def __init__(self, manual_count):
        super().__init__(
            f"{manual_count} manual allocation(s) exist; "
            "reconciliation would discard them",
            manualAllocations=manual_count,
        )

"""
Interactive allocation planner.

Works on plain balance snapshots only; it never touches the database.
The transaction owner (services.payment.allocate_payment) loads the
snapshots under row locks, asks for a plan and then either persists the
plan or raises the returned error so the surrounding atomic block rolls
back.
"""
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from ..constants import (ALLOCATION_TOLERANCE, FULLY_ALLOCATED, MAX_AMOUNT,
                         MAX_PK, PARTIAL, UNALLOCATED, ZERO)
from ..exceptions import (AllocationError, EntryOverAllocated,
                          InvalidAllocationRequest, LedgerEntryNotFound,
                          PaymentOverAllocated, VendorMismatch)
from .validation import has_cents_precision


@dataclass(frozen=True)
class AllocationLine:
    entry_id: int
    amount: Decimal


@dataclass(frozen=True)
class PaymentBalance:
    id: int
    vendor_id: int
    amount: Decimal
    allocated: Decimal = ZERO

    @property
    def remaining(self):
        return self.amount - self.allocated


@dataclass(frozen=True)
class EntryBalance:
    id: int
    vendor_id: Optional[int]
    total_amount: Decimal
    allocated: Decimal = ZERO

    @property
    def due(self):
        return self.total_amount - self.allocated


@dataclass(frozen=True)
class PlannedAllocation:
    payment_id: int
    entry_id: int
    amount: Decimal


@dataclass
class AllocationResult:
    """Either a full plan (error is None) or the first violation found."""

    allocations: List[PlannedAllocation] = field(default_factory=list)
    allocated_total: Decimal = ZERO
    status: Optional[str] = None
    error: Optional[AllocationError] = None

    @property
    def ok(self):
        return self.error is None

    @classmethod
    def rejected(cls, error):
        return cls(error=error)


def derive_allocation_status(allocated, amount):
    """
    UNALLOCATED when nothing is allocated, FULLY_ALLOCATED when the
    allocated total is within tolerance of the payment amount,
    PARTIAL otherwise.
    """
    if allocated == ZERO:
        return UNALLOCATED
    if abs(amount - allocated) < ALLOCATION_TOLERANCE:
        return FULLY_ALLOCATED
    return PARTIAL


def parse_allocation_lines(raw_lines) -> List[AllocationLine]:
    """
    Validate request shape before any state is read.
    Accepts dicts with entry_id / amount (amount as str, int or Decimal).
    """
    if not raw_lines or not isinstance(raw_lines, (list, tuple)):
        raise InvalidAllocationRequest("No allocations provided")

    lines = []
    for index, raw in enumerate(raw_lines):
        if not isinstance(raw, dict):
            raise InvalidAllocationRequest(
                f"Allocation #{index + 1} must be an object", index=index)

        raw_id = raw.get("entry_id")
        try:
            entry_id = int(raw_id)
        except (TypeError, ValueError, OverflowError):
            entry_id = None
        # ids outside the primary-key range cannot name a row
        if entry_id is None or isinstance(raw_id, bool) or not 0 < entry_id <= MAX_PK:
            raise InvalidAllocationRequest(
                f"Allocation #{index + 1} has an invalid entry_id", index=index)

        raw_amount = raw.get("amount")
        # floats go through str() so 0.1 stays 0.1
        if isinstance(raw_amount, float):
            raw_amount = str(raw_amount)
        try:
            amount = Decimal(raw_amount)
        except (TypeError, ValueError, InvalidOperation):
            raise InvalidAllocationRequest(
                f"Allocation #{index + 1} has an invalid amount", index=index)
        if not amount.is_finite() or amount <= ZERO:
            raise InvalidAllocationRequest(
                "Allocation amount must be positive", index=index)
        if amount > MAX_AMOUNT:
            raise InvalidAllocationRequest(
                f"Allocation amount cannot exceed {MAX_AMOUNT}", index=index)
        if not has_cents_precision(amount):
            raise InvalidAllocationRequest(
                "Allocation amount cannot have more than 2 decimal places",
                index=index)

        lines.append(AllocationLine(entry_id=entry_id, amount=amount))
    return lines


def plan_payment_allocation(
    payment: PaymentBalance,
    entries: Dict[int, EntryBalance],
    lines: List[AllocationLine],
) -> AllocationResult:
    """
    Check a batch of operator-chosen allocations against one payment.

    `entries` maps entry id → snapshot for every entry the batch names
    (missing ids are reported as not found). The batch is all or nothing:
    the first violation is returned and no plan is produced.
    """
    requested_total = sum((line.amount for line in lines), ZERO)

    # Validation: prevent over-allocation of the payment
    if payment.allocated + requested_total > payment.amount:
        return AllocationResult.rejected(
            PaymentOverAllocated(
                current_allocated=payment.allocated,
                requested_total=requested_total,
                payment_amount=payment.amount,
            )
        )

    # Earlier lines in the same batch reduce what later lines may take
    running_due = {}
    planned = []
    for line in lines:
        entry = entries.get(line.entry_id)
        if entry is None:
            return AllocationResult.rejected(LedgerEntryNotFound(line.entry_id))

        if entry.vendor_id != payment.vendor_id:
            return AllocationResult.rejected(
                VendorMismatch(entry.id, entry.vendor_id, payment.vendor_id)
            )

        due = running_due.get(entry.id, entry.due)
        # amounts are exact cents, so the due is a hard ceiling
        if line.amount > due:
            return AllocationResult.rejected(
                EntryOverAllocated(entry.id, line.amount, due)
            )

        running_due[entry.id] = due - line.amount
        planned.append(
            PlannedAllocation(
                payment_id=payment.id, entry_id=entry.id, amount=line.amount
            )
        )

    allocated_total = payment.allocated + requested_total
    return AllocationResult(
        allocations=planned,
        allocated_total=allocated_total,
        status=derive_allocation_status(allocated_total, payment.amount),
    )

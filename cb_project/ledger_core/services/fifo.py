"""
Oldest-first matching of one vendor's payments against its ledger entries.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Sequence

from ..constants import FULLY_ALLOCATED, PARTIAL, UNALLOCATED, ZERO
from .allocation import PlannedAllocation


@dataclass(frozen=True)
class FifoPayment:
    id: int
    payment_date: date
    amount: Decimal


@dataclass(frozen=True)
class FifoEntry:
    id: int
    entry_date: date
    total_amount: Decimal


@dataclass
class FifoOutcome:
    allocations: List[PlannedAllocation]
    # keyed by payment / entry id
    payment_remaining: dict
    entry_remaining: dict
    payment_status: dict


def status_from_remaining(remaining, original):
    if remaining <= ZERO:
        return FULLY_ALLOCATED
    if remaining < original:
        return PARTIAL
    return UNALLOCATED


def fifo_match(
    payments: Sequence[FifoPayment], entries: Sequence[FifoEntry]
) -> FifoOutcome:
    """
    Greedy single pass: the oldest payment is used up (or the oldest entry
    fully paid) before the cursor moves on. Inputs may arrive in any order;
    they are sorted by (date, id) so the result only depends on the data.
    """
    payments = sorted(payments, key=lambda p: (p.payment_date, p.id))
    entries = sorted(entries, key=lambda e: (e.entry_date, e.id))

    # Remaining balances owned by this pass, indexed like the sorted lists
    payment_left = [p.amount for p in payments]
    entry_left = [e.total_amount for e in entries]

    allocations = []
    p_idx = 0
    e_idx = 0
    while p_idx < len(payments) and e_idx < len(entries):
        if payment_left[p_idx] <= ZERO:
            p_idx += 1
            continue
        if entry_left[e_idx] <= ZERO:
            e_idx += 1
            continue

        amount = min(payment_left[p_idx], entry_left[e_idx])
        allocations.append(
            PlannedAllocation(
                payment_id=payments[p_idx].id,
                entry_id=entries[e_idx].id,
                amount=amount,
            )
        )
        payment_left[p_idx] -= amount
        entry_left[e_idx] -= amount

    payment_remaining = {p.id: left for p, left in zip(payments, payment_left)}
    return FifoOutcome(
        allocations=allocations,
        payment_remaining=payment_remaining,
        entry_remaining={e.id: left for e, left in zip(entries, entry_left)},
        payment_status={
            p.id: status_from_remaining(payment_remaining[p.id], p.amount)
            for p in payments
        },
    )

from .allocation import (AllocationResult, EntryBalance, PaymentBalance,
                         derive_allocation_status, parse_allocation_lines,
                         plan_payment_allocation)
from .entries import create_entry, delete_entry, update_entry
from .fifo import FifoEntry, FifoPayment, fifo_match
from .payment import allocate_payment, create_payment, delete_payment
from .reconcile import ReconcileSummary, reconcile_allocations
from .reports import (dashboard_totals, date_wise_expenses, item_wise_report,
                      vendor_ledger)
from .staging import load_staging_workbook, sync_staged_payments
from .worklog import create_work_log, list_work_logs

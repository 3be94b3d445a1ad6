from .actions import reconcile_fifo, reconcile_fifo_discard_manual
from .auditlog import AuditLogAdmin
from .entry import LedgerEntryAdmin, VendorAdmin
from .inlines import PaymentAllocationInline
from .item import ItemAdmin
from .payment import PaymentAdmin, PaymentAllocationAdmin
from .ReadOnly import ReadOnlyAdmin
from .worklog import DailyWorkLogAdmin, WorkMediaInline

from .allocation import PaymentAllocation
from .auditlog import AuditLog
from .entry import LedgerEntry
from .item import Item
from .payment import Payment
from .vendor import Vendor
from .worklog import DailyWorkLog, WorkMedia

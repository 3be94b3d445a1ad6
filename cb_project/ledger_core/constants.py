from decimal import Decimal

# Absolute tolerance for every equality / boundary check on money sums
ALLOCATION_TOLERANCE = Decimal("0.01")

ZERO = Decimal("0.00")
CENT = Decimal("0.01")

ITEM_TYPE_CHOICES = [
    ("MATERIAL", "Material"),
    ("SERVICE", "Service"),
]

PAYMENT_MODE_CHOICES = [
    ("CASH", "Cash"),
    ("UPI", "UPI"),
    ("BANK_TRANSFER", "Bank Transfer"),
    ("CHEQUE", "Cheque"),
    ("OTHER", "Other"),
]

UNALLOCATED = "UNALLOCATED"
PARTIAL = "PARTIAL"
FULLY_ALLOCATED = "FULLY_ALLOCATED"

ALLOCATION_STATUS_CHOICES = [
    (UNALLOCATED, "Unallocated"),
    (PARTIAL, "Partially allocated"),
    (FULLY_ALLOCATED, "Fully allocated"),
]

# Who produced an allocation row
MANUAL = "MANUAL"
FIFO = "FIFO"

ALLOCATION_SOURCE_CHOICES = [
    (MANUAL, "Manual"),
    (FIFO, "FIFO reconciliation"),
]

# Largest values the DecimalField(12, 2) money and (10, 2) quantity columns hold
MAX_AMOUNT = Decimal("9999999999.99")
MAX_QUANTITY = Decimal("99999999.99")
# Largest BigAutoField primary key
MAX_PK = 2**63 - 1

MEDIA_TYPE_CHOICES = [
    ("IMAGE", "Image"),
    ("VIDEO", "Video"),
    ("DOCUMENT", "Document"),
]

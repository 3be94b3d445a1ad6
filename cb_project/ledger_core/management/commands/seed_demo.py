import datetime
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from ledger_core.models import Item, Vendor
from ledger_core.services import create_entry, create_payment

User = get_user_model()

# (name, item_type, unit)
DEMO_ITEMS = [
    ("Cement", "MATERIAL", "bag"),
    ("Sand", "MATERIAL", "cft"),
    ("Steel TMT", "MATERIAL", "kg"),
    ("Masonry labour", "SERVICE", "day"),
]

DEMO_VENDORS = ["Shree Cement Traders", "Ganesh Sand Suppliers", "Ravi Masonry Works"]


class Command(BaseCommand):
    help = "Seeds the database with demo vendors, items, entries and payments."

    # Define command-line argument
    def add_arguments(self, parser):
        parser.add_argument(
            "--username",
            default="demo",
            help="Username recorded as creator of the demo rows (default: demo)",
        )
        parser.add_argument(
            "--password", default="demo123", help="Password for the demo user."
        )

    @transaction.atomic
    def handle(self, *args, **options):
        username = options["username"]
        password = options["password"]
        self.stdout.write(self.style.NOTICE("Seeding demo data..."))

        user, created = User.objects.get_or_create(
            username=username, defaults={"email": f"{username}@example.com"}
        )
        if created:
            user.set_password(password)
            user.save()

        items = {}
        for name, item_type, unit in DEMO_ITEMS:
            items[name], _ = Item.objects.get_or_create(
                name=name, defaults={"item_type": item_type, "unit": unit}
            )
        vendors = {}
        for name in DEMO_VENDORS:
            vendors[name], _ = Vendor.objects.get_or_create(name=name)

        start = datetime.date(2024, 1, 1)
        cement, sand, masonry = (vendors[n] for n in DEMO_VENDORS)

        # nothing to do on a second run
        if cement.paid_entries.exists():
            self.stdout.write(self.style.WARNING("Demo entries already present"))
            return

        create_entry(item=items["Cement"], entry_date=start, quantity=100,
                     unit="bag", total_amount=Decimal("38000.00"),
                     paid_to_vendor=cement, user=user)
        create_entry(item=items["Steel TMT"], entry_date=start + datetime.timedelta(days=4),
                     quantity=500, unit="kg", total_amount=Decimal("31250.00"),
                     paid_to_vendor=cement, user=user)
        create_entry(item=items["Sand"], entry_date=start + datetime.timedelta(days=2),
                     quantity=300, unit="cft", total_amount=Decimal("15000.00"),
                     paid_to_vendor=sand, user=user)
        create_entry(item=items["Masonry labour"], entry_date=start + datetime.timedelta(days=7),
                     quantity=12, unit="day", total_amount=Decimal("10800.00"),
                     paid_to_vendor=masonry, user=user)

        create_payment(vendor=cement, payment_date=start + datetime.timedelta(days=1),
                       amount=Decimal("50000.00"), payment_mode="BANK_TRANSFER",
                       reference_no="NEFT-0001", user=user)
        create_payment(vendor=sand, payment_date=start + datetime.timedelta(days=3),
                       amount=Decimal("20000.00"), payment_mode="UPI", user=user)
        create_payment(vendor=masonry, payment_date=start + datetime.timedelta(days=9),
                       amount=Decimal("5000.00"), payment_mode="CASH", user=user)

        self.stdout.write(self.style.SUCCESS("Demo data seeded successfully!"))
        self.stdout.write("Run `manage.py reconcile_allocations` to allocate the payments.")

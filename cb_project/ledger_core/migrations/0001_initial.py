import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Vendor",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("normalized_name", models.CharField(editable=False, max_length=200, unique=True)),
                ("contact_details", models.CharField(blank=True, max_length=255, null=True)),
                ("tax_id", models.CharField(blank=True, max_length=50, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Item",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("normalized_name", models.CharField(editable=False, max_length=200, unique=True)),
                ("item_type", models.CharField(choices=[("MATERIAL", "Material"), ("SERVICE", "Service")], max_length=20)),
                ("unit", models.CharField(max_length=30)),
                ("category", models.CharField(blank=True, default="General", max_length=100)),
                ("description", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("entry_date", models.DateField()),
                ("quantity", models.DecimalField(decimal_places=2, max_digits=10)),
                ("unit", models.CharField(max_length=30)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("rate", models.DecimalField(blank=True, decimal_places=2, editable=False, max_digits=12, null=True)),
                ("remarks", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="ledger_entries", to=settings.AUTH_USER_MODEL)),
                ("item", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="entries", to="ledger_core.item")),
                ("paid_to_vendor", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="paid_entries", to="ledger_core.vendor")),
                ("source_vendor", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="sourced_entries", to="ledger_core.vendor")),
            ],
            options={
                "verbose_name_plural": "ledger entries",
                "indexes": [
                    models.Index(fields=["paid_to_vendor", "entry_date"], name="entry_vendor_date_idx"),
                    models.Index(fields=["entry_date"], name="entry_date_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("quantity__gt", 0)), name="entry_quantity_positive"),
                    models.CheckConstraint(condition=models.Q(("total_amount__gt", 0)), name="entry_total_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("payment_date", models.DateField()),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("payment_mode", models.CharField(choices=[("CASH", "Cash"), ("UPI", "UPI"), ("BANK_TRANSFER", "Bank Transfer"), ("CHEQUE", "Cheque"), ("OTHER", "Other")], default="BANK_TRANSFER", max_length=20)),
                ("reference_no", models.CharField(blank=True, max_length=100, null=True)),
                ("remarks", models.TextField(blank=True, null=True)),
                ("allocation_status", models.CharField(choices=[("UNALLOCATED", "Unallocated"), ("PARTIAL", "Partially allocated"), ("FULLY_ALLOCATED", "Fully allocated")], default="UNALLOCATED", max_length=20)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="payments", to=settings.AUTH_USER_MODEL)),
                ("vendor", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="payments", to="ledger_core.vendor")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["vendor", "payment_date"], name="payment_vendor_date_idx"),
                    models.Index(fields=["allocation_status"], name="payment_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="payment_amount_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentAllocation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("allocated_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("source", models.CharField(choices=[("MANUAL", "Manual"), ("FIFO", "FIFO reconciliation")], default="MANUAL", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("entry", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="allocations", to="ledger_core.ledgerentry")),
                ("payment", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="allocations", to="ledger_core.payment")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["payment"], name="allocation_payment_idx"),
                    models.Index(fields=["entry"], name="allocation_entry_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("allocated_amount__gt", 0)), name="allocation_amount_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(max_length=50)),
                ("object_type", models.CharField(max_length=100)),
                ("object_id", models.CharField(max_length=100)),
                ("changes", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["object_type", "object_id"], name="auditlog_object_idx"),
                    models.Index(fields=["created_at"], name="auditlog_created_idx"),
                ],
            },
        ),
    ]

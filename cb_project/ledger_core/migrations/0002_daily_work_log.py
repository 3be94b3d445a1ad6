import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("ledger_core", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="DailyWorkLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("work_date", models.DateField()),
                ("description", models.TextField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="work_logs", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-work_date", "-created_at"],
                "indexes": [models.Index(fields=["work_date"], name="worklog_date_idx")],
            },
        ),
        migrations.CreateModel(
            name="WorkMedia",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("media_type", models.CharField(choices=[("IMAGE", "Image"), ("VIDEO", "Video"), ("DOCUMENT", "Document")], max_length=10)),
                ("drive_url", models.URLField(max_length=500)),
                ("caption", models.CharField(blank=True, max_length=255, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("work_log", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="media", to="ledger_core.dailyworklog")),
            ],
            options={
                "verbose_name_plural": "work media",
                "ordering": ["id"],
            },
        ),
    ]

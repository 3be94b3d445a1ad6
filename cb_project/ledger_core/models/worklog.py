from django.conf import settings
from django.db import models

from ..constants import MEDIA_TYPE_CHOICES


# ---------- Site diary ----------
class DailyWorkLog(models.Model):  # What happened on site on a given day

    work_date = models.DateField()
    description = models.TextField()

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="work_logs",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-work_date", "-created_at"]
        indexes = [models.Index(fields=["work_date"], name="worklog_date_idx")]

    def __str__(self):
        return f"{self.work_date}: {self.description[:40]}"

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)


class WorkMedia(models.Model):  # Photo / video / document link attached to a log

    work_log = models.ForeignKey(
        DailyWorkLog, on_delete=models.CASCADE, related_name="media"
    )
    media_type = models.CharField(max_length=10, choices=MEDIA_TYPE_CHOICES)
    # Files live in shared cloud storage; only the link is kept
    drive_url = models.URLField(max_length=500)
    caption = models.CharField(max_length=255, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "work media"
        ordering = ["id"]

    def __str__(self):
        return f"{self.media_type} for log {self.work_log_id}"

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from ..models import DailyWorkLog, WorkMedia
from .audit_helper import log_action

logger = logging.getLogger(__name__)


def create_work_log(*, work_date, description, media=None, user=None):
    """
    Record a day's site work with optional media links.
    `media` is a list of {"media_type", "drive_url", "caption"?} dicts;
    the log and its media are saved together or not at all.
    """
    if not description or not str(description).strip():
        raise ValidationError("Description is required")
    if media is not None and not isinstance(media, (list, tuple)):
        raise ValidationError("Media must be a list")

    with transaction.atomic():
        log = DailyWorkLog.objects.create(
            work_date=work_date,
            description=str(description).strip(),
            created_by=user if getattr(user, "is_authenticated", False) else None,
        )
        for index, item in enumerate(media or []):
            if not isinstance(item, dict):
                raise ValidationError(f"Media #{index + 1} must be an object")
            # each save() runs full_clean(): bad type or URL aborts the log
            WorkMedia.objects.create(
                work_log=log,
                media_type=item.get("media_type"),
                drive_url=item.get("drive_url"),
                caption=item.get("caption"),
            )
        log_action(
            action="create",
            instance=log,
            user=user,
            changes={"work_date": str(log.work_date), "media": len(media or [])},
        )

    logger.info("Work log %s recorded for %s", log.pk, log.work_date)
    return log


def list_work_logs(start_date=None, end_date=None):
    """Logs newest first, media prefetched."""
    qs = DailyWorkLog.objects.prefetch_related("media")
    if start_date:
        qs = qs.filter(work_date__gte=start_date)
    if end_date:
        qs = qs.filter(work_date__lte=end_date)
    return qs.order_by("-work_date", "-created_at")

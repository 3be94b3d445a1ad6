from ..models import AuditLog


def log_action(
    *,
    action: str,
    instance=None,
    user=None,
    object_type: str | None = None,
    object_id=None,
    changes: dict | None = None,
):
    """
    Central audit logger.
    Pass `instance` for a single record, or object_type/object_id for
    batch actions (e.g. a reconciliation run) that span many rows.
    """
    if instance is not None:
        object_type = object_type or instance.__class__.__name__
        object_id = instance.pk if object_id is None else object_id

    # anonymous request users are not stored
    if user is not None and not getattr(user, "is_authenticated", False):
        user = None

    return AuditLog.objects.create(
        user=user,
        action=action,
        object_type=object_type or "",
        object_id=str(object_id if object_id is not None else ""),
        changes=changes,
    )

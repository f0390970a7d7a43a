from ..models import AuditLog


def log_action(*, action: str, instance, user=None, changes: dict | None = None):
    """
    Central audit logger.
    Safe to call multiple times (caller ensures idempotency).
    """
    # anonymous users are recorded as "system"
    if user is not None and not getattr(user, "is_authenticated", False):
        user = None

    return AuditLog.objects.create(
        user=user,
        action=action,
        object_type=instance.__class__.__name__,
        object_id=str(instance.pk),
        changes=changes,
    )

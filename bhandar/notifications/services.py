"""Helpers other apps use to raise notifications"""
import logging

from django.contrib.auth import get_user_model

from .models import Notification

logger = logging.getLogger('bhandar.notifications')


def notify(recipients, type, title, message, related_id=None, related_date=None):
    """
    Create one notification per distinct recipient.

    Accepts a single user, an iterable of users, or None entries (skipped).
    Returns the created notifications.
    """
    if recipients is None:
        return []
    if isinstance(recipients, get_user_model()):
        recipients = [recipients]

    seen = set()
    notifications = []
    for user in recipients:
        if user is None or user.pk in seen:
            continue
        seen.add(user.pk)
        notifications.append(Notification(
            recipient=user,
            type=type,
            title=title,
            message=message,
            related_id=str(related_id) if related_id is not None else None,
            related_date=related_date,
        ))

    created = Notification.objects.bulk_create(notifications)
    if created:
        logger.info(f"Sent '{type}' notification to {len(created)} user(s)")
    return created


def cluster_heads():
    User = get_user_model()
    return User.objects.filter(role=User.ROLE_CLUSTER_HEAD, is_active=True)

"""
Notification housekeeping tasks.
"""
from celery import shared_task
from django.conf import settings
from django.utils import timezone
from datetime import timedelta
import logging

logger = logging.getLogger(__name__)


@shared_task
def purge_read_notifications(retention_days=None):
    """
    Delete read notifications older than NOTIFICATION_RETENTION_DAYS.

    Scheduled via Celery Beat to run weekly. Unread notifications are kept
    regardless of age.
    """
    from notifications.models import Notification

    if retention_days is None:
        retention_days = settings.NOTIFICATION_RETENTION_DAYS

    cutoff = timezone.now() - timedelta(days=retention_days)
    deleted, _ = Notification.objects.filter(read=True, created_at__lt=cutoff).delete()

    logger.info(f"Purged {deleted} read notifications older than {retention_days} days")
    return deleted

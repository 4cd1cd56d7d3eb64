"""
Celery configuration for the Banana Marketplace backend.

Order lifecycle operations are synchronous request/response calls; Celery
only runs housekeeping on a schedule.
"""
import os
from celery import Celery
from celery.schedules import crontab

# Set the default Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'core.settings')

# Create Celery app
app = Celery('core')

# Load config from Django settings with CELERY_ prefix
app.config_from_object('django.conf:settings', namespace='CELERY')

# Auto-discover tasks in all installed apps
app.autodiscover_tasks()


# =============================================================================
# CELERY BEAT SCHEDULE - Periodic Tasks
# =============================================================================
app.conf.beat_schedule = {
    # Purge old read notifications (run weekly on Sunday 2 AM)
    'purge-read-notifications': {
        'task': 'notifications.tasks.purge_read_notifications',
        'schedule': crontab(hour=2, minute=0, day_of_week=0),
    },
}

app.conf.update(
    result_expires=3600,  # 1 hour

    task_time_limit=300,  # 5 minutes hard limit
    task_soft_time_limit=240,  # 4 minutes soft limit

    task_acks_late=True,
    task_reject_on_worker_lost=True,

    worker_prefetch_multiplier=1,

    task_serializer='json',
    result_serializer='json',
    accept_content=['json'],

    timezone='Asia/Bangkok',
    enable_utc=True,
)

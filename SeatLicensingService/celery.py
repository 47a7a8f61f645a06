"""
Celery configuration for background tasks.

Used for billing reconciliation and the periodic license maintenance jobs.
"""
import os

from celery import Celery
from celery.schedules import crontab

# Set default Django settings module
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "SeatLicensingService.settings.base")

app = Celery("SeatLicensingService")

# Load configuration from Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()

app.conf.beat_schedule = {
    "check-license-expirations": {
        "task": "core.tasks.check_license_expirations_task",
        "schedule": crontab(hour=6, minute=0),
    },
    "apply-scheduled-license-changes": {
        "task": "core.tasks.apply_scheduled_license_changes_task",
        "schedule": crontab(minute=15),
    },
    "cleanup-trial-organizations": {
        "task": "core.tasks.cleanup_trial_organizations_task",
        "schedule": crontab(hour=3, minute=30),
    },
}

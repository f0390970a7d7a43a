from __future__ import annotations
import os
from celery import Celery
from celery.schedules import crontab

# ensure Django settings are set for Celery
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "dist_project.settings")

celery_app = Celery("dist_project")

# read config from Django settings, using CELERY_ prefix
celery_app.config_from_object("django.conf:settings", namespace="CELERY")

# autoload tasks.py from installed apps (accounting, applications)
celery_app.autodiscover_tasks()

# nightly housekeeping for the accounting app
celery_app.conf.beat_schedule = {
    "mark-overdue-purchases": {
        "task": "accounting.tasks.mark_overdue_purchases",
        "schedule": crontab(hour=0, minute=30),
    },
    "refresh-party-balances": {
        "task": "accounting.tasks.refresh_party_balances",
        "schedule": crontab(hour=1, minute=0),
    },
}

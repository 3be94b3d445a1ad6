from __future__ import annotations
import os
from celery import Celery

# ensure Django settings are set for Celery
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "cb_project.settings")

celery_app = Celery("cb_project")

# read config from Django settings, using CELERY_ prefix
celery_app.config_from_object("django.conf:settings", namespace="CELERY")

# pick up ledger_core.tasks and any other app's tasks module
celery_app.autodiscover_tasks()

# Celery app lives in cb_project/celery.py and is loaded together with Django
# so that @shared_task functions bind to it
from .celery import celery_app

__all__ = ("celery_app",)

""" Start a worker with "celery -A cb_project worker -l info";
    -A cb_project imports this module and finds celery_app. """

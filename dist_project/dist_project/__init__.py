# Celery instance is defined in dist_project/celery.py
# celery_app is the task queue app for the whole project
from .celery import celery_app

# 'from dist_project import *' only exports celery_app
__all__ = ("celery_app",)

""" Workers are started with "celery -A dist_project worker -l info".
    -A dist_project imports this module, which exposes celery_app. """

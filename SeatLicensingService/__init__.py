"""
Seat Licensing Service Django project.
"""
# Make sure the Celery app is loaded when Django starts so that tasks
# registered with it are bound to this configuration.
from .celery import app as celery_app

__all__ = ("celery_app",)

# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import CELERY_BROKER_URL

# fire-and-forget tasks only, so no result backend
celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
)

# tasks have to be imported explicitly for the worker to register them
celery_app.conf.imports = (
    "storefront.services.notification_service",
)

celery_app.conf.timezone = "UTC"
celery_app.conf.task_ignore_result = True

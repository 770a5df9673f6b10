from celery import Celery

from app.core.config import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, MAINTENANCE_QUEUE


def make_celery(app_name: str = "eventsphere") -> Celery:
    celery = Celery(app_name, broker=CELERY_BROKER_URL, backend=CELERY_RESULT_BACKEND, include=["app.tasks"])
    celery.conf.task_serializer = "json"
    celery.conf.result_serializer = "json"
    celery.conf.accept_content = ["json"]
    celery.conf.result_persistent = False
    celery.conf.task_track_started = True
    # counter reconciliation is idempotent, so a redelivered task is harmless
    celery.conf.task_acks_late = True
    celery.conf.task_reject_on_worker_lost = True
    celery.conf.task_routes = {"app.tasks.reconcile_participants_task": {"queue": MAINTENANCE_QUEUE}}
    return celery


celery_app = make_celery()

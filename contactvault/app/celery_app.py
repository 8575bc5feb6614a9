"""
Module: celery_app.

But: Initialiser l'instance Celery de l'application, charger la config runtime et planifier le
scan périodique des rappels échus (Celery beat).
"""

from celery import Celery

from contactvault.core.container import container

celery_app = Celery(
    container.settings.APP_NAME,
    broker=container.settings.CELERY_BROKER_URL,
    backend=container.settings.CELERY_RESULT_BACKEND,
    include=["contactvault.tasks.reminder_tasks"],
)
# Load configuration from module (retries, timeouts, acks)
celery_app.config_from_object("contactvault.app.celeryconfig")
celery_app.conf.task_routes = {"contactvault.tasks.*": {"queue": "default"}}
celery_app.conf.beat_schedule = {
    "process-due-reminders": {
        "task": "contactvault.tasks.process_due_reminders",
        "schedule": float(container.settings.REMINDER_SCAN_SECONDS),
    },
}

__all__ = ["celery_app"]

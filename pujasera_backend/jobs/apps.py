# jobs/apps.py

from django.apps import AppConfig


class JobsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "jobs"
    verbose_name = "Job Queue"

    def ready(self):
        from jobs import signals  # noqa: F401

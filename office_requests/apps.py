from django.apps import AppConfig


class OfficeRequestsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "office_requests"
    verbose_name = "officeFlow requests"

    def ready(self) -> None:
        # Import signals so the handlers are registered when the app starts.
        from . import signals  # noqa: F401

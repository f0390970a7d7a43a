from django.apps import AppConfig


class AccountingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "accounting"

    # ensure receivers are registered
    def ready(self):
        import accounting.signals

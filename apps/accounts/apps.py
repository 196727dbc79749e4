from django.apps import AppConfig


class AccountsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.accounts"
    verbose_name = "Accounts & Profiles"

    def ready(self):
        # import signals to ensure they are registered
        from . import signals  # noqa

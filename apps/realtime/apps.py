from django.apps import AppConfig


class RealtimeConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.realtime"
    verbose_name = "Realtime feeds"

    def ready(self):
        from .signals import connect_feeds

        connect_feeds()

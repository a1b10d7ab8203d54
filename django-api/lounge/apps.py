from django.apps import AppConfig


class LoungeConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "lounge"
    verbose_name = "Gaming lounge"

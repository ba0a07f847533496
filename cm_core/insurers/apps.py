from django.apps import AppConfig


class InsurersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "cm_core.insurers"

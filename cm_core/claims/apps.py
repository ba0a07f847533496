from django.apps import AppConfig


class ClaimsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "cm_core.claims"

    def ready(self):
        # registers the claim lifecycle table
        import cm_core.claims.lifecycle  # noqa: F401

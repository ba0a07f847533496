from django.apps import AppConfig


class PoliciesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "cm_core.policies"

    def ready(self):
        # registers the policy lifecycle table
        import cm_core.policies.lifecycle  # noqa: F401

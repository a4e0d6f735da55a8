from django.apps import AppConfig


class CrpAccountingConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'crp_accounting'
    verbose_name = "CRP Ledger"

    def ready(self):
        import crp_accounting.signals  # noqa: F401

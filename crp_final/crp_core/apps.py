from django.apps import AppConfig


class CrpCoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'crp_core'

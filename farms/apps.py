from django.apps import AppConfig


class FarmsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'farms'
    verbose_name = 'Farm Directory'

from django.apps import AppConfig


class ExclusivesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.exclusives'

from django.apps import AppConfig


class TrackingConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'logistics.tracking'
    label = 'tracking'
    verbose_name = 'Public tracking'

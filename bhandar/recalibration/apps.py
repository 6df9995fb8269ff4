from django.apps import AppConfig


class RecalibrationConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'bhandar.recalibration'

from django.apps import AppConfig


class LocationsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'bhandar.locations'

    def ready(self):
        """Connect cache invalidation signals"""
        import bhandar.locations.cache  # noqa: F401

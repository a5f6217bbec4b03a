from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core'
    verbose_name = 'Core'

    def ready(self):
        """Build the process-wide callback registry from EDITOR_PLUGINS."""
        from django.conf import settings
        from apps.core.callbacks import get_registry, load_plugins

        load_plugins(getattr(settings, 'EDITOR_PLUGINS', []), get_registry())

from django.apps import AppConfig


class CatalogConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'catalog'
    verbose_name = "商品目录"

    def ready(self):
        from catalog.application.event_handlers import register_event_handlers
        register_event_handlers()

from django.apps import AppConfig


class SalesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'sales'
    verbose_name = "购物车与订单"

    def ready(self):
        from sales.application.event_handlers import register_event_handlers
        register_event_handlers()

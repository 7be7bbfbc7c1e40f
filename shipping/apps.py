from django.apps import AppConfig


class ShippingConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'shipping'
    verbose_name = "收货地址"

    def ready(self):
        from shipping.application.event_handlers import register_event_handlers
        register_event_handlers()

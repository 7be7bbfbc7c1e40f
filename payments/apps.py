from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'payments'
    verbose_name = "支付"

    def ready(self):
        from payments.application.event_handlers import register_event_handlers
        register_event_handlers()

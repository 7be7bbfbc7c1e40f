from django.apps import AppConfig


class IdentityConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'identity'
    verbose_name = "身份认证"

    def ready(self):
        from identity.application.event_handlers import register_event_handlers
        register_event_handlers()

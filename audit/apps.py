from django.apps import AppConfig


class AuditConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'audit'
    verbose_name = "审计日志"

    def ready(self):
        from audit.application.event_handlers import register_event_handlers
        register_event_handlers()

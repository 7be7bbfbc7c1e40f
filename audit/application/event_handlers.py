"""
审计事件处理器。
订阅DomainEvent基类，所有领域事件都会被记录。
"""
from core.domain import DomainEvent, DomainEvents


def record_audit_log(event: DomainEvent) -> None:
    from audit.infrastructure.factory import AuditInfrastructureFactory
    AuditInfrastructureFactory().create_audit_service().record_event(event)


def register_event_handlers() -> None:
    DomainEvents.register(DomainEvent, record_audit_log)

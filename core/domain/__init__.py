"""
领域模型包。
提供实体、值对象、聚合根、领域事件和结果模式等领域驱动设计(DDD)的核心概念。
"""

# 基础类
from core.domain.base import Entity, utc_now
from core.domain.value_objects import (
    ValueObject,
    Money,
    Email,
    Slug,
    PhoneNumber,
    PostalAddress,
)
from core.domain.aggregates import AggregateRoot

# 结果模式
from core.domain.results import ErrorType, Error, Result

# 领域事件
from core.domain.events import DomainEvent, DomainEvents

# 领域异常
from core.domain.exceptions import (
    DomainException,
    EntityNotFoundException,
    BusinessRuleViolationException,
    ConcurrencyException,
    ConflictException,
    DuplicateEntityException,
    InsufficientStockException,
    ValidationException,
    AuthenticationException,
    AuthorizationException,
    ExternalServiceException,
)

# 仓储接口
from core.domain.repositories import Repository, PaginatedRepository

__all__ = [
    # 基础类
    'Entity',
    'utc_now',
    'ValueObject',
    'Money',
    'Email',
    'Slug',
    'PhoneNumber',
    'PostalAddress',
    'AggregateRoot',

    # 结果模式
    'ErrorType',
    'Error',
    'Result',

    # 领域事件
    'DomainEvent',
    'DomainEvents',

    # 领域异常
    'DomainException',
    'EntityNotFoundException',
    'BusinessRuleViolationException',
    'ConcurrencyException',
    'ConflictException',
    'DuplicateEntityException',
    'InsufficientStockException',
    'ValidationException',
    'AuthenticationException',
    'AuthorizationException',
    'ExternalServiceException',

    # 仓储接口
    'Repository',
    'PaginatedRepository',
]

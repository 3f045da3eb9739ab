"""
Core - 通用应用基础设施

提供与具体协议无关的基础设施组件:
- 统一异常体系
- 服务生命周期管理
- 结构化日志
"""

from .exceptions import (
    ApplicationError,
    ConfigurationError,
    ErrorCategory,
    NotFoundError,
    NoteNotFoundError,
    PersistenceError,
    ValidationError,
)
from .lifecycle import (
    ServiceDefinition,
    ServiceRegistry,
    get_service_registry,
    register_core_services,
    reset_service_registry,
)

__all__ = [
    # Exceptions
    "ErrorCategory",
    "ApplicationError",
    "NotFoundError",
    "ValidationError",
    "PersistenceError",
    "ConfigurationError",
    "NoteNotFoundError",
    # Lifecycle
    "ServiceRegistry",
    "ServiceDefinition",
    "get_service_registry",
    "reset_service_registry",
    "register_core_services",
]

# src/service_providers/__init__.py
"""
service-providers：把集中配置解析为数据库连接、日志、AMQP 连接、
SendGrid 客户端与命名字符串表，并注册到 dependency-injector 容器中。
"""

from service_providers.bootstrap import create_container, default_service_providers
from service_providers.exceptions import (
    InvalidConfigurationError,
    MissingDependencyError,
    ProviderCreationError,
    ServiceProviderError,
)

__version__ = "0.1.0"

__all__ = [
    "InvalidConfigurationError",
    "MissingDependencyError",
    "ProviderCreationError",
    "ServiceProviderError",
    "__version__",
    "create_container",
    "default_service_providers",
]

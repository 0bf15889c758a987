# src/service_providers/exceptions.py
"""
服务提供者的统一异常体系。

所有失败都在资源构造时同步抛出（绝不在注册期抛出），
外部库的原始异常一律通过 `raise ... from exc` 链接为 __cause__。
"""

from __future__ import annotations

from typing import Optional


class ServiceProviderError(Exception):
    """所有服务提供者异常的基类。"""

    pass


class MissingDependencyError(ServiceProviderError):
    """容器中缺少必需的依赖（例如未绑定 `config` 服务）。"""

    pass


class InvalidConfigurationError(ServiceProviderError):
    """配置缺失、结构错误或字段类型不符。"""

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class ProviderCreationError(ServiceProviderError):
    """配置合法，但外部能力库在构造资源时失败（驱动缺失、连接被拒等）。"""

    pass

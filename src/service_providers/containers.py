# src/service_providers/containers.py
"""
组合根（Composition Root）。

`ApplicationContainer` 只声明与资源族无关的基础设施（库配置、诊断日志）；
各资源族的命名服务由 ServiceProvider 在 bootstrap 阶段动态注册。
"""

from __future__ import annotations

from dependency_injector import containers, providers

from service_providers.config import ProvidersSettings
from service_providers.observability.logging_config import setup_logging


class ApplicationContainer(containers.DeclarativeContainer):
    """应用的顶层 DI 容器。"""

    settings = providers.Dependency(instance_of=ProvidersSettings)

    # 日志系统初始化器，init_resources() 时调用一次
    observability = providers.Resource(
        setup_logging,
        log_level=settings.provided.logging.level,
        log_format=settings.provided.logging.format,
        service=settings.provided.service_name,
    )

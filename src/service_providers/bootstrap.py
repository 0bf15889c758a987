# src/service_providers/bootstrap.py
"""
应用引导：创建容器、绑定 `config` 服务并注册默认服务提供者。
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Optional

import structlog
from dependency_injector import providers

from service_providers.config import ProvidersSettings
from service_providers.containers import ApplicationContainer
from service_providers.core.source import CONFIG_KEY
from service_providers.providers import (
    AmqpProvider,
    ConfigurationFile,
    DatabaseProvider,
    LoggerProvider,
    PathsProvider,
    SendGridProvider,
    ServiceProvider,
    UrlsProvider,
)

logger = structlog.get_logger(__name__)


def default_service_providers() -> list[ServiceProvider]:
    return [
        DatabaseProvider(),
        LoggerProvider(),
        AmqpProvider(),
        SendGridProvider(),
        PathsProvider(),
        UrlsProvider(),
    ]


def create_container(
    settings: Optional[ProvidersSettings] = None,
    *,
    config: Optional[Mapping[str, Any]] = None,
    service_providers: Optional[Iterable[ServiceProvider]] = None,
) -> ApplicationContainer:
    """
    创建并装配容器。

    `config` 优先于 settings.config_file；两者都没有时不绑定 `config`，
    此时任何资源的构造都会抛出 MissingDependencyError。
    """
    settings = settings or ProvidersSettings()
    container = ApplicationContainer()
    container.settings.override(settings)

    if config is not None:
        container.set_provider(CONFIG_KEY, providers.Object(config))
    elif settings.config_file is not None:
        ConfigurationFile(settings.config_file).register(container)

    registered = list(
        service_providers if service_providers is not None else default_service_providers()
    )
    for provider in registered:
        provider.register(container)

    logger.debug(
        "容器装配完成",
        has_config=CONFIG_KEY in container.providers,
        providers=[type(p).__name__ for p in registered],
    )
    return container

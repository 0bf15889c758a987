# src/service_providers/providers/base.py
"""
服务提供者基类（注册适配器）。

注册期只做绑定，不读取配置、不构造资源；所有解析与构造都推迟到
容器首次取值时发生。需要共享实例的多个名称绑定到同一个 provider 对象。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from dependency_injector import containers, providers

from service_providers.core.source import ContainerConfigSource


class ServiceProvider(ABC):
    """向容器注册一个或多个命名服务。"""

    @abstractmethod
    def register(self, container: containers.Container) -> None:
        raise NotImplementedError

    @staticmethod
    def config_source(container: containers.Container) -> ContainerConfigSource:
        return ContainerConfigSource(container)

    @staticmethod
    def bind(
        container: containers.Container,
        names: Iterable[str],
        provider: providers.Provider,
    ) -> None:
        for name in names:
            container.set_provider(name, provider)

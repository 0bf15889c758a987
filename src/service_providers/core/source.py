# src/service_providers/core/source.py
"""
容器配置源：区分“从未绑定配置”与“已绑定但内容为空/缺键”。
"""

from __future__ import annotations

from typing import Any

from dependency_injector import containers

CONFIG_KEY = "config"


class ContainerConfigSource:
    """从 DI 容器中读取 `config` 服务；每次 get() 都重新向容器取值，不做缓存。"""

    def __init__(self, container: containers.Container, key: str = CONFIG_KEY) -> None:
        self._container = container
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def exists(self) -> bool:
        return self._key in self._container.providers

    def get(self) -> Any:
        if not self.exists():
            return None
        return self._container.providers[self._key]()

# src/service_providers/providers/named_strings.py
"""
命名字符串表（paths、urls 等）。

绑定到容器的是一个查找函数：lookup(key) 在每次调用时都重新读取
config[collection][key]，注册期与首次取值时都不会读取配置。
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from dependency_injector import containers, providers

from service_providers.core.family import ResourceFamily
from service_providers.core.resolver import select_section
from service_providers.core.source import ContainerConfigSource
from service_providers.exceptions import InvalidConfigurationError
from service_providers.providers.base import ServiceProvider


def named_string_family(collection: str) -> ResourceFamily:
    return ResourceFamily(name=collection, aliases=(collection,))


def lookup_named_string(config: Any, family: ResourceFamily, key: str) -> str:
    """读取 config[collection][key] 并转换为字符串。"""
    collection = family.name
    table = select_section(config, family)
    if not isinstance(table, Mapping):
        raise InvalidConfigurationError(
            f"{collection} 配置必须是键到字符串的映射", field=collection
        )
    value = table.get(key)
    if value is None:
        raise InvalidConfigurationError(f"{collection} 中不存在键 {key!r}", field=key)
    if isinstance(value, (Mapping, list, tuple, set)):
        raise InvalidConfigurationError(
            f"{collection}.{key} 必须是标量值，实际为 {type(value).__name__}",
            field=key,
        )
    return str(value)


class NamedStringLookup:
    def __init__(self, source: ContainerConfigSource, collection: str) -> None:
        self._source = source
        self.family = named_string_family(collection)

    @property
    def collection(self) -> str:
        return self.family.name

    def __call__(self, key: str) -> str:
        return lookup_named_string(self._source.get(), self.family, key)


class NamedStringProvider(ServiceProvider):
    def __init__(self, collection: str) -> None:
        if not collection:
            raise ValueError("collection 不能为空")
        self.collection = collection

    def register(self, container: containers.Container) -> None:
        lookup = providers.Singleton(
            NamedStringLookup, self.config_source(container), self.collection
        )
        self.bind(container, (self.collection,), lookup)


class PathsProvider(NamedStringProvider):
    def __init__(self) -> None:
        super().__init__("paths")


class UrlsProvider(NamedStringProvider):
    def __init__(self) -> None:
        super().__init__("urls")

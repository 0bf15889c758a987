# src/service_providers/core/registry.py
"""
类型判别注册表：按配置中的 `type` 字段选择变体（处理器类型、连接类型等）。

注册表是开放的，新变体通过 `register` 装饰器挂入，无需改动调用方。
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

from service_providers.core.resolver import build_record
from service_providers.exceptions import InvalidConfigurationError

T = TypeVar("T")


@dataclass(frozen=True)
class Variant(Generic[T]):
    name: str
    model: type[BaseModel]
    build: Callable[[Any], T]


class VariantRegistry(Generic[T]):
    def __init__(self, kind: str, *, discriminator: str = "type") -> None:
        self.kind = kind
        self.discriminator = discriminator
        self._variants: dict[str, Variant[T]] = {}

    def register(
        self, name: str, model: type[BaseModel], *, aliases: tuple[str, ...] = ()
    ) -> Callable[[Callable[[Any], T]], Callable[[Any], T]]:
        def decorator(build: Callable[[Any], T]) -> Callable[[Any], T]:
            variant = Variant(name=name, model=model, build=build)
            for key in (name, *aliases):
                if key in self._variants:
                    raise ValueError(f"{self.kind} 类型 {key!r} 已注册")
                self._variants[key] = variant
            return build

        return decorator

    def __contains__(self, name: object) -> bool:
        return name in self._variants

    def names(self) -> list[str]:
        return sorted(self._variants)

    def get(self, name: Any) -> Variant[T]:
        if not name:
            raise InvalidConfigurationError(
                f"未指定 {self.kind} 的 {self.discriminator!r} 字段",
                field=self.discriminator,
            )
        variant = self._variants.get(name) if isinstance(name, str) else None
        if variant is None:
            raise InvalidConfigurationError(
                f"不支持的 {self.kind} {self.discriminator}：{name!r}，"
                f"可用类型：{', '.join(self.names())}",
                field=self.discriminator,
            )
        return variant

    def resolve(
        self, section: Any, *, label: str, default: Optional[str] = None
    ) -> tuple[Variant[T], BaseModel]:
        """选出变体并用其记录模型校验子配置。"""
        if not isinstance(section, Mapping):
            raise InvalidConfigurationError(
                f"{label} 配置必须是映射类型，实际为 {type(section).__name__}"
            )
        name = section.get(self.discriminator) or default
        variant = self.get(name)
        # 缺省类型写回判别字段，记录模型可以要求 type 必填
        record = build_record(
            {**section, self.discriminator: name},
            variant.model,
            label=f"{label} ({variant.name})",
        )
        return variant, record

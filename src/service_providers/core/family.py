# src/service_providers/core/family.py
"""
资源族（Resource Family）：一类可构造资源的静态身份。

每个资源族声明：
- aliases   ：按优先级排列的配置键，第一个非 None 的键胜出；
- model     ：pydantic 记录模型，承载默认值、必填字段与类型约束；
- fallbacks ：字段名回退表，例如 username ← (username, user)；
- normalizer：可选的形状归一化（例如裸字符串 → 映射）。
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel


@dataclass(frozen=True)
class ResourceFamily:
    name: str
    aliases: tuple[str, ...]
    model: Optional[type[BaseModel]] = None
    fallbacks: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    normalizer: Optional[Callable[[Any], Any]] = None

    def __post_init__(self) -> None:
        if not self.aliases:
            raise ValueError(f"资源族 {self.name!r} 至少需要一个配置键别名")

    @property
    def primary_key(self) -> str:
        return self.aliases[0]

    def normalize(self, section: Any) -> Any:
        if self.normalizer is None:
            return section
        return self.normalizer(section)

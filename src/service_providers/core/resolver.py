# src/service_providers/core/resolver.py
"""
统一的配置解析协议。

resolve(config, family, instance_name) 的步骤：
1. 未绑定配置（None）→ MissingDependencyError；
2. 按别名优先级选择资源族子树，首个非 None 的键胜出；
3. 给定实例名时，按名称精确选择子配置，缺失或为空 → InvalidConfigurationError；
4. 应用字段名回退（首个非空候选胜出）；
5. 默认记录 + 用户配置的浅合并（用户值优先）；
6. pydantic 校验，首个失败字段写入异常的 field 属性；
7. 返回冻结的记录实例。

整个过程只读：输入配置永远不会被修改，每一步都返回新的 dict。
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from service_providers.core.family import ResourceFamily
from service_providers.exceptions import (
    InvalidConfigurationError,
    MissingDependencyError,
)

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_EMPTY = (None, "")


def select_section(config: Any, family: ResourceFamily) -> Any:
    """按别名优先级定位资源族子树。"""
    if config is None:
        raise MissingDependencyError(
            f"容器中未绑定 'config' 服务，无法解析 {family.name} 配置"
        )
    if not isinstance(config, Mapping):
        raise InvalidConfigurationError(
            f"应用配置必须是映射类型，实际为 {type(config).__name__}"
        )
    for alias in family.aliases:
        section = config.get(alias)
        if section is not None:
            logger.debug("已选择配置子树", family=family.name, key=alias)
            return section
    keys = ", ".join(repr(a) for a in family.aliases)
    raise InvalidConfigurationError(
        f"缺少 {family.name} 配置，需在以下键之一提供：{keys}",
        field=family.primary_key,
    )


def select_instance(
    section: Any, family: ResourceFamily, instance_name: Optional[str] = None
) -> Any:
    """在资源族子树中按实例名选择子配置；未给定实例名时原样返回。"""
    if instance_name is None:
        return section
    if not isinstance(section, Mapping):
        raise InvalidConfigurationError(
            f"{family.name} 配置不是实例名到子配置的映射，无法选择实例 {instance_name!r}",
            field=instance_name,
        )
    instance = section.get(instance_name)
    if not instance:
        raise InvalidConfigurationError(
            f"{family.name} 配置中不存在实例 {instance_name!r} 或其配置为空",
            field=instance_name,
        )
    return instance


def first_present(section: Mapping[str, Any], candidates: tuple[str, ...]) -> Any:
    """返回候选键中第一个非空的值；全部为空时返回 None。"""
    for key in candidates:
        value = section.get(key)
        if value not in _EMPTY:
            return value
    return None


def apply_fallbacks(
    section: Mapping[str, Any], fallbacks: Mapping[str, tuple[str, ...]]
) -> dict[str, Any]:
    data = dict(section)
    for field_name, candidates in fallbacks.items():
        value = first_present(section, candidates)
        if value is not None:
            data[field_name] = value
    return data


def defaults_of(model: type[BaseModel]) -> dict[str, Any]:
    """按配置键（别名优先）导出模型中所有非必填字段的默认值。"""
    defaults: dict[str, Any] = {}
    for name, info in model.model_fields.items():
        if info.is_required():
            continue
        defaults[info.alias or name] = info.get_default(call_default_factory=True)
    return defaults


def overlay(defaults: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    # 浅合并：只作用于第一层
    return {**defaults, **overrides}


def validate_record(model: type[ModelT], data: Mapping[str, Any], label: str) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        loc = first.get("loc") or ()
        field_name = str(loc[0]) if loc else None
        path = ".".join(str(part) for part in loc) or "<root>"
        raise InvalidConfigurationError(
            f"{label} 配置无效：字段 {path!r} {first['msg']}",
            field=field_name,
        ) from exc


def build_record(
    section: Any,
    model: type[ModelT],
    *,
    label: str,
    fallbacks: Optional[Mapping[str, tuple[str, ...]]] = None,
) -> ModelT:
    """对已选定的子配置执行 回退 → 合并默认值 → 校验。"""
    if not isinstance(section, Mapping):
        raise InvalidConfigurationError(
            f"{label} 配置必须是映射类型，实际为 {type(section).__name__}"
        )
    data = apply_fallbacks(section, fallbacks or {})
    merged = overlay(defaults_of(model), data)
    return validate_record(model, merged, label)


def resolve_section(
    section: Any, family: ResourceFamily, instance_name: Optional[str] = None
) -> Any:
    selected = select_instance(section, family, instance_name)
    normalized = family.normalize(selected)
    if family.model is None:
        return normalized
    label = family.name if instance_name is None else f"{family.name}[{instance_name}]"
    return build_record(normalized, family.model, label=label, fallbacks=family.fallbacks)


def resolve(
    config: Any, family: ResourceFamily, instance_name: Optional[str] = None
) -> Any:
    """
    从完整应用配置解析出某资源族（可选某实例）的规范化记录。

    Raises:
        MissingDependencyError: 未绑定任何配置。
        InvalidConfigurationError: 子树缺失、实例缺失或字段校验失败。
    """
    section = select_section(config, family)
    return resolve_section(section, family, instance_name)

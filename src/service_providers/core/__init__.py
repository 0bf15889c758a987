# src/service_providers/core/__init__.py
"""
配置解析核心：资源族定义、统一解析协议、类型判别注册表与容器配置源。
"""

from .family import ResourceFamily
from .registry import Variant, VariantRegistry
from .resolver import (
    apply_fallbacks,
    build_record,
    defaults_of,
    first_present,
    overlay,
    resolve,
    resolve_section,
    select_instance,
    select_section,
    validate_record,
)
from .source import ContainerConfigSource

__all__ = [
    "ContainerConfigSource",
    "ResourceFamily",
    "Variant",
    "VariantRegistry",
    "apply_fallbacks",
    "build_record",
    "defaults_of",
    "first_present",
    "overlay",
    "resolve",
    "resolve_section",
    "select_instance",
    "select_section",
    "validate_record",
]

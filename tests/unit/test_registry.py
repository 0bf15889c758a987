# tests/unit/test_registry.py
"""
测试类型判别注册表：注册、别名、缺失与未知类型。
"""

import pytest
from pydantic import BaseModel

from service_providers.core.registry import VariantRegistry
from service_providers.exceptions import InvalidConfigurationError


class EchoSettings(BaseModel):
    type: str
    value: int = 1


@pytest.fixture
def registry():
    reg: VariantRegistry[int] = VariantRegistry("widget")

    @reg.register("Echo", EchoSettings, aliases=("Repeat",))
    def build(settings: EchoSettings) -> int:
        return settings.value

    return reg


def test_resolve_known_type_validates_record(registry):
    variant, record = registry.resolve({"type": "Echo", "value": 5}, label="widget")
    assert variant.name == "Echo"
    assert variant.build(record) == 5


def test_alias_resolves_to_same_variant(registry):
    assert registry.get("Repeat") is registry.get("Echo")
    assert "Repeat" in registry
    assert registry.names() == ["Echo", "Repeat"]


def test_default_type_is_used_when_missing(registry):
    variant, record = registry.resolve({}, label="widget", default="Echo")
    assert variant.name == "Echo"
    assert record.type == "Echo"
    assert record.value == 1


def test_explicit_type_is_kept_on_record(registry):
    _, record = registry.resolve({"type": "Repeat"}, label="widget", default="Echo")
    assert record.type == "Repeat"


@pytest.mark.parametrize("section", [{}, {"type": ""}, {"type": None}])
def test_missing_type_is_invalid(registry, section):
    with pytest.raises(InvalidConfigurationError) as exc_info:
        registry.resolve(section, label="widget")
    assert exc_info.value.field == "type"


def test_unknown_type_is_invalid(registry):
    with pytest.raises(InvalidConfigurationError) as exc_info:
        registry.resolve({"type": "Nope"}, label="widget")
    assert "Nope" in str(exc_info.value)
    assert exc_info.value.field == "type"


def test_non_mapping_section_is_invalid(registry):
    with pytest.raises(InvalidConfigurationError):
        registry.resolve("Echo", label="widget")


def test_duplicate_registration_is_rejected(registry):
    with pytest.raises(ValueError):
        registry.register("Echo", EchoSettings)(lambda s: 0)

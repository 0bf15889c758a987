# src/service_providers/presentation/cli/_inspect.py
"""
只解析、不构造的配置体检逻辑，供 `check` / `show` 命令使用。
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Literal, Optional

from pydantic import BaseModel

from service_providers.core.family import ResourceFamily
from service_providers.core.resolver import resolve, resolve_section, select_section
from service_providers.exceptions import InvalidConfigurationError, ServiceProviderError
from service_providers.providers.amqp import AMQP, resolve_amqp_settings
from service_providers.providers.database import DATABASE
from service_providers.providers.dsn import to_url
from service_providers.providers.logger import HANDLER_TYPES, LOGGER
from service_providers.providers.named_strings import (
    lookup_named_string,
    named_string_family,
)
from service_providers.providers.sendgrid import SENDGRID

SECRET_KEYS = frozenset({"password", "apiKey", "api_key", "loginResponse", "login_response"})
MASK = "***"
NAMED_STRING_COLLECTIONS = ("paths", "urls")

Status = Literal["ok", "unconfigured", "error"]


@dataclass(frozen=True)
class CheckResult:
    family: str
    target: str
    status: Status
    detail: str = ""


def mask_secrets(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {
            k: (MASK if k in SECRET_KEYS and v not in (None, "") else mask_secrets(v))
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [mask_secrets(v) for v in value]
    return value


def is_configured(config: Mapping[str, Any], family: ResourceFamily) -> bool:
    return any(config.get(alias) is not None for alias in family.aliases)


def database_instances(section: Any) -> list[Optional[str]]:
    """含 dsn 的子树视为单连接；全部值都是映射时视为命名多连接。"""
    if (
        isinstance(section, Mapping)
        and section
        and "dsn" not in section
        and all(isinstance(v, Mapping) for v in section.values())
    ):
        return list(section)
    return [None]


def _run(family: str, target: str, fn: Callable[[], str]) -> CheckResult:
    try:
        detail = fn()
    except ServiceProviderError as exc:
        return CheckResult(family, target, "error", str(exc))
    return CheckResult(family, target, "ok", detail)


def _check_database(config: Mapping[str, Any]) -> list[CheckResult]:
    section = select_section(config, DATABASE)

    def one(name: Optional[str]) -> str:
        settings = resolve_section(section, DATABASE, name)
        url = to_url(settings.dsn, settings.username, settings.password)
        return url.render_as_string(hide_password=True)

    return [
        _run(DATABASE.name, name or "default", lambda name=name: one(name))
        for name in database_instances(section)
    ]


def _check_logger(config: Mapping[str, Any]) -> list[CheckResult]:
    try:
        settings = resolve(config, LOGGER)
    except ServiceProviderError as exc:
        return [CheckResult(LOGGER.name, "default", "error", str(exc))]

    results = [CheckResult(LOGGER.name, "default", "ok", f"name={settings.name}")]
    for index, handler in enumerate(settings.handlers):
        label = f"handlers[{index}]"
        results.append(
            _run(
                LOGGER.name,
                label,
                lambda h=handler, label=label: HANDLER_TYPES.resolve(
                    h, label=f"{LOGGER.name}.{label}"
                )[0].name,
            )
        )
    return results


def _check_amqp(config: Mapping[str, Any]) -> list[CheckResult]:
    def one() -> str:
        variant, settings = resolve_amqp_settings(config)
        return f"{variant.name} {settings.host}:{settings.port}{settings.vhost}"

    return [_run(AMQP.name, "default", one)]


def _check_sendgrid(config: Mapping[str, Any]) -> list[CheckResult]:
    def one() -> str:
        settings = resolve(config, SENDGRID)
        return f"options={sorted(settings.options)}"

    return [_run(SENDGRID.name, "default", one)]


def _check_named_strings(config: Mapping[str, Any], collection: str) -> list[CheckResult]:
    family = named_string_family(collection)
    table = config.get(collection)
    if not isinstance(table, Mapping):
        return [
            CheckResult(collection, "*", "error", f"{collection} 配置必须是键到字符串的映射")
        ]
    return [
        _run(collection, str(key), lambda key=key: lookup_named_string(config, family, key))
        for key in table
    ]


def run_checks(config: Mapping[str, Any]) -> list[CheckResult]:
    checks: list[tuple[ResourceFamily, Callable[[Mapping[str, Any]], list[CheckResult]]]] = [
        (DATABASE, _check_database),
        (LOGGER, _check_logger),
        (AMQP, _check_amqp),
        (SENDGRID, _check_sendgrid),
    ]
    for collection in NAMED_STRING_COLLECTIONS:
        checks.append(
            (
                named_string_family(collection),
                lambda cfg, c=collection: _check_named_strings(cfg, c),
            )
        )

    results: list[CheckResult] = []
    for family, check in checks:
        if not is_configured(config, family):
            results.append(CheckResult(family.name, "-", "unconfigured"))
            continue
        results.extend(check(config))
    return results


def resolve_record(
    config: Mapping[str, Any], family: str, name: Optional[str] = None
) -> dict[str, Any]:
    """返回某资源族的规范化记录（已屏蔽密钥），用于展示。"""
    record: BaseModel
    if family == DATABASE.name:
        record = resolve(config, DATABASE, name)
    elif family == LOGGER.name:
        record = resolve(config, LOGGER)
    elif family == AMQP.name:
        record = resolve_amqp_settings(config)[1]
    elif family == SENDGRID.name:
        record = resolve(config, SENDGRID)
    else:
        raise InvalidConfigurationError(f"未知的资源族：{family!r}", field=family)
    return mask_secrets(record.model_dump(mode="json", by_alias=True))


SHOWABLE_FAMILIES = (DATABASE.name, LOGGER.name, AMQP.name, SENDGRID.name)

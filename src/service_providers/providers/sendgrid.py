# src/service_providers/providers/sendgrid.py
"""
SendGrid 通知客户端资源族。

配置键 `sendgrid` 可以是裸字符串（即 API Key），也可以是
{apiKey, options} 映射；两种形式归一化为同一条记录后再构造客户端。
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any

import httpx
import structlog
from dependency_injector import containers, providers
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictStr, StringConstraints

from service_providers.core.family import ResourceFamily
from service_providers.core.resolver import resolve
from service_providers.core.source import ContainerConfigSource
from service_providers.exceptions import InvalidConfigurationError
from service_providers.infrastructure.sendgrid_client import create_sendgrid_client
from service_providers.providers.base import ServiceProvider

logger = structlog.get_logger(__name__)


def normalize_sendgrid(section: Any) -> dict[str, Any]:
    if isinstance(section, str):
        return {"apiKey": section, "options": {}}
    if isinstance(section, Mapping):
        return dict(section)
    raise InvalidConfigurationError(
        f"sendgrid 配置必须是 API Key 字符串或映射，实际为 {type(section).__name__}",
        field="sendgrid",
    )


class SendGridSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    api_key: Annotated[StrictStr, StringConstraints(min_length=1)] = Field(alias="apiKey")
    options: Annotated[dict[str, Any], BeforeValidator(lambda v: {} if v is None else v)] = Field(
        default_factory=dict
    )


SENDGRID = ResourceFamily(
    name="sendgrid",
    aliases=("sendgrid",),
    model=SendGridSettings,
    normalizer=normalize_sendgrid,
)


def create_client(settings: SendGridSettings) -> httpx.Client:
    try:
        client = create_sendgrid_client(settings.api_key, settings.options)
    except TypeError as exc:
        raise InvalidConfigurationError(
            f"sendgrid options 无效：{exc}", field="options"
        ) from exc
    logger.debug("SendGrid 客户端已创建", base_url=str(client.base_url))
    return client


def create_sendgrid(source: ContainerConfigSource) -> httpx.Client:
    return create_client(resolve(source.get(), SENDGRID))


class SendGridProvider(ServiceProvider):
    """
    `sendgrid` / `SendGrid` 共享一个单例客户端；
    `sendgridFactory` / `SendGridFactory` 每次取值都构造新客户端。
    """

    names = ("sendgrid", "SendGrid")
    factory_names = ("sendgridFactory", "SendGridFactory")

    def register(self, container: containers.Container) -> None:
        source = self.config_source(container)
        self.bind(container, self.names, providers.Singleton(create_sendgrid, source))
        self.bind(container, self.factory_names, providers.Factory(create_sendgrid, source))

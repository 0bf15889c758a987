# src/service_providers/providers/amqp.py
"""
AMQP 连接资源族（py-amqp）。

配置键优先级：`amqp` 先于 `rabbitmq`。`type` 字段选择连接变体，
缺省为 AMQPStreamConnection。容器绑定的是连接工厂：每次调用都重新
读取配置并建立一条新连接。
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional, Union

import amqp
import structlog
from amqp.exceptions import AMQPError
from dependency_injector import containers, providers
from pydantic import BaseModel, ConfigDict, Field, StrictStr

from service_providers.core.family import ResourceFamily
from service_providers.core.registry import Variant, VariantRegistry
from service_providers.core.resolver import select_section
from service_providers.core.source import ContainerConfigSource
from service_providers.exceptions import (
    InvalidConfigurationError,
    ProviderCreationError,
)
from service_providers.providers.base import ServiceProvider

logger = structlog.get_logger(__name__)

DEFAULT_CONNECTION_TYPE = "AMQPStreamConnection"


class AmqpStreamSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    type: str = DEFAULT_CONNECTION_TYPE
    host: StrictStr
    port: int = 5672
    user: StrictStr
    password: StrictStr
    vhost: StrictStr = "/"
    login_method: StrictStr = Field(default="AMQPLAIN", alias="loginMethod")
    login_response: Optional[Union[StrictStr, bytes]] = Field(default=None, alias="loginResponse")
    locale: StrictStr = "en_US"
    timeout: float = Field(default=3.0, gt=0, description="连接超时（秒）")
    read_write_timeout: float = Field(default=3.0, gt=0, alias="readWriteTimeout")
    context: Optional[Union[bool, dict[str, Any]]] = Field(
        default=None, description="SSL：true 或 ssl 参数映射"
    )
    heartbeat: int = Field(default=0, ge=0, alias="heartBeat")


SASL_METHODS = frozenset({"AMQPLAIN", "PLAIN", "EXTERNAL", "GSSAPI"})


def _login_args(settings: AmqpStreamSettings) -> tuple[Any, Any]:
    # 自定义 SASL 机制（RAW）要求机制名与响应均为 bytes
    method: Any = settings.login_method
    response: Any = settings.login_response
    if response is None or method in SASL_METHODS:
        return method, response
    if isinstance(response, str):
        response = response.encode()
    return method.encode(), response


AMQP = ResourceFamily(name="amqp", aliases=("amqp", "rabbitmq"))

CONNECTION_TYPES: VariantRegistry[amqp.Connection] = VariantRegistry("amqp connection")


@CONNECTION_TYPES.register(DEFAULT_CONNECTION_TYPE, AmqpStreamSettings)
def build_stream_connection(settings: AmqpStreamSettings) -> amqp.Connection:
    login_method, login_response = _login_args(settings)
    try:
        connection = amqp.Connection(
            host=f"{settings.host}:{settings.port}",
            userid=settings.user,
            password=settings.password,
            virtual_host=settings.vhost,
            login_method=login_method,
            login_response=login_response,
            locale=settings.locale,
            ssl=settings.context or False,
            connect_timeout=settings.timeout,
            read_timeout=settings.read_write_timeout,
            write_timeout=settings.read_write_timeout,
            heartbeat=settings.heartbeat,
        )
    except ValueError as exc:
        raise InvalidConfigurationError(
            f"AMQP 登录方式无效：{settings.login_method!r}", field="loginMethod"
        ) from exc

    try:
        connection.connect()
    except (OSError, AMQPError) as exc:
        raise ProviderCreationError(
            f"无法连接 AMQP 服务 {settings.host}:{settings.port}{settings.vhost}"
        ) from exc

    logger.info(
        "AMQP 连接已建立", host=settings.host, port=settings.port, vhost=settings.vhost
    )
    return connection


def resolve_amqp_settings(config: Any) -> tuple[Variant[amqp.Connection], BaseModel]:
    section = select_section(config, AMQP)
    if not isinstance(section, Mapping) or not section:
        raise InvalidConfigurationError("AMQP 配置为空或不是映射", field=AMQP.primary_key)
    return CONNECTION_TYPES.resolve(
        section, label=AMQP.name, default=DEFAULT_CONNECTION_TYPE
    )


def create_amqp_connection(config: Any) -> amqp.Connection:
    variant, settings = resolve_amqp_settings(config)
    return variant.build(settings)


class AmqpConnectionFactory:
    """可调用的连接工厂；每次调用都新建连接，连接的关闭由调用方负责。"""

    def __init__(self, source: ContainerConfigSource) -> None:
        self._source = source

    def __call__(self) -> amqp.Connection:
        return create_amqp_connection(self._source.get())


class AmqpProvider(ServiceProvider):
    names = ("amqp", "rabbitmq", "AMQPConnection")

    def register(self, container: containers.Container) -> None:
        factory = providers.Singleton(AmqpConnectionFactory, self.config_source(container))
        self.bind(container, self.names, factory)

# src/service_providers/providers/database.py
"""
数据库资源族：按配置构造 SQLAlchemy Connection。

配置键优先级：`pdo` 先于 `database`；`username` 缺失时回退到 `user`。
构造分两阶段且顺序固定：create_engine(url, **options) → connect()，
随后逐个应用 attributes（Connection.execution_options）。
引擎默认使用 NullPool：句柄关闭即关闭底层连接，options 可覆盖 poolclass。
"""

from __future__ import annotations

from typing import Any, Optional

import structlog
from dependency_injector import containers, providers
from pydantic import BaseModel, ConfigDict, Field, StrictStr
from sqlalchemy import create_engine
from sqlalchemy.engine import Connection
from sqlalchemy.exc import ArgumentError, NoSuchModuleError, SQLAlchemyError
from sqlalchemy.pool import NullPool

from service_providers.core.family import ResourceFamily
from service_providers.core.resolver import resolve_section, select_section
from service_providers.core.source import ContainerConfigSource
from service_providers.exceptions import (
    InvalidConfigurationError,
    ProviderCreationError,
)
from service_providers.providers.base import ServiceProvider
from service_providers.providers.dsn import to_url

logger = structlog.get_logger(__name__)


class DatabaseSettings(BaseModel):
    """单个数据库连接的规范化配置。"""

    model_config = ConfigDict(frozen=True, extra="ignore")

    dsn: StrictStr
    username: StrictStr
    password: StrictStr
    options: dict[str, Any] = Field(default_factory=dict, description="create_engine 参数")
    attributes: dict[str, Any] = Field(
        default_factory=dict, description="连接建立后逐个应用的 execution_options"
    )


DATABASE = ResourceFamily(
    name="database",
    aliases=("pdo", "database"),
    model=DatabaseSettings,
    fallbacks={"username": ("username", "user")},
)


def create_connection(settings: DatabaseSettings, *, instance: Optional[str] = None) -> Connection:
    url = to_url(settings.dsn, settings.username, settings.password)

    try:
        engine = create_engine(url, **{"poolclass": NullPool, **settings.options})
    except (NoSuchModuleError, ImportError) as exc:
        raise ProviderCreationError(
            f"数据库驱动不可用：{url.drivername}"
        ) from exc
    except (ArgumentError, TypeError) as exc:
        raise InvalidConfigurationError(
            f"数据库 options 无效：{exc}", field="options"
        ) from exc

    try:
        connection = engine.connect()
    except SQLAlchemyError as exc:
        engine.dispose()
        raise ProviderCreationError(
            f"无法连接数据库 {url.render_as_string(hide_password=True)}"
        ) from exc

    for key, value in settings.attributes.items():
        try:
            connection.execution_options(**{key: value})
        except (ArgumentError, TypeError, ValueError) as exc:
            connection.close()
            raise InvalidConfigurationError(
                f"数据库属性 {key!r} 的值 {value!r} 无效", field="attributes"
            ) from exc

    logger.info("数据库连接已创建", dialect=url.get_backend_name(), instance=instance)
    return connection


class DatabaseConnector:
    """
    显式的连接工厂值：只持有已选定的数据库配置子树。

    每次调用都重新解析并新建连接，不做缓存；需要复用连接时由调用方自行保存。
    """

    def __init__(self, section: Any) -> None:
        self._section = section

    @property
    def section(self) -> Any:
        return self._section

    def settings(self, name: Optional[str] = None) -> DatabaseSettings:
        return resolve_section(self._section, DATABASE, name)

    def connect(self, name: Optional[str] = None) -> Connection:
        return create_connection(self.settings(name), instance=name)

    __call__ = connect


def create_connector(source: ContainerConfigSource) -> DatabaseConnector:
    return DatabaseConnector(select_section(source.get(), DATABASE))


class DatabaseProvider(ServiceProvider):
    """以 `pdo` 与 `database` 两个名称注册同一个连接工厂。"""

    names = ("pdo", "database")

    def register(self, container: containers.Container) -> None:
        connector = providers.Singleton(create_connector, self.config_source(container))
        self.bind(container, self.names, connector)

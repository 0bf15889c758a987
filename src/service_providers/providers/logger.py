# src/service_providers/providers/logger.py
"""
日志资源族：按配置构造带处理器链的 ServiceLogger。

配置键优先级：`log` → `logger` → `monolog`。
每个处理器条目由 `type` 字段选择变体；公共字段 level（默认 debug）与
bubble（默认 true）对所有变体生效。
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from collections.abc import Mapping
from typing import Annotated, Any, Literal, Optional

import structlog
from dependency_injector import containers, providers
from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictStr,
    StringConstraints,
    field_validator,
)

from service_providers.core.family import ResourceFamily
from service_providers.core.registry import VariantRegistry
from service_providers.core.resolver import resolve
from service_providers.core.source import ContainerConfigSource
from service_providers.exceptions import (
    InvalidConfigurationError,
    ProviderCreationError,
    ServiceProviderError,
)
from service_providers.infrastructure.logging_handlers import (
    ErrorLogHandler,
    SendGridMailHandler,
    ServiceLogger,
)
from service_providers.providers.base import ServiceProvider

logger = structlog.get_logger(__name__)

NOTICE = 25

LEVEL_NAMES: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "notice": NOTICE,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "alert": logging.CRITICAL,
    "emergency": logging.CRITICAL,
}

# Monolog 数值级别
MONOLOG_LEVELS: dict[int, int] = {
    100: logging.DEBUG,
    200: logging.INFO,
    250: NOTICE,
    300: logging.WARNING,
    400: logging.ERROR,
    500: logging.CRITICAL,
    550: logging.CRITICAL,
    600: logging.CRITICAL,
}

DEFAULT_FORMAT = "[%(asctime)s] %(name)s.%(levelname)s: %(message)s"

STDOUT_RESOURCES = frozenset({"php://stdout", "php://output", "stdout"})
STDERR_RESOURCES = frozenset({"php://stderr", "stderr"})


def to_level(value: Any) -> int:
    """把级别名、标准库级别数值或 Monolog 级别数值统一为标准库级别。"""
    if isinstance(value, bool):
        raise ValueError("日志级别不能是布尔值")
    if isinstance(value, str):
        text = value.strip().lower()
        if text in LEVEL_NAMES:
            return LEVEL_NAMES[text]
        if not text.isdigit():
            raise ValueError(f"未知的日志级别：{value!r}")
        value = int(text)
    if isinstance(value, int):
        if value in MONOLOG_LEVELS:
            return MONOLOG_LEVELS[value]
        if 0 <= value <= logging.CRITICAL:
            return value
    raise ValueError(f"未知的日志级别：{value!r}")


def _to_recipients(value: Any) -> Any:
    if isinstance(value, str):
        return [value]
    return value


def _to_file_permission(value: Any) -> Any:
    # "0644" / "644" 按八进制解释
    if isinstance(value, str):
        try:
            return int(value, 8)
        except ValueError as exc:
            raise ValueError(f"filePermission 不是八进制数：{value!r}") from exc
    return value


def _to_message_type(value: Any) -> Any:
    if value in (0, "0"):
        return "operating_system"
    if value in (4, "4"):
        return "sapi"
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _to_handler_list(value: Any) -> Any:
    # YAML 中空的 `handlers:` 解析为 None
    return [] if value is None else value


def _to_mailer(value: Any) -> Any:
    # "smtp.example.com:2525" 简写
    if isinstance(value, str):
        host, sep, port = value.rpartition(":")
        if sep and host and port.isdigit():
            return {"host": host, "port": int(port)}
        return {"host": value}
    return value


Level = Annotated[int, BeforeValidator(to_level)]
NonEmptyStr = Annotated[StrictStr, StringConstraints(min_length=1)]
Recipients = Annotated[list[NonEmptyStr], BeforeValidator(_to_recipients), Field(min_length=1)]


class HandlerSettings(BaseModel):
    """所有处理器共有的字段。"""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    type: str
    level: Level = logging.DEBUG
    bubble: bool = True


class StreamHandlerSettings(HandlerSettings):
    resource: Any
    file_permission: Annotated[Optional[int], BeforeValidator(_to_file_permission)] = Field(
        default=None, alias="filePermission"
    )

    @field_validator("resource")
    @classmethod
    def _check_resource(cls, v: Any) -> Any:
        if isinstance(v, str):
            if not v.strip():
                raise ValueError("resource 不能为空")
            return v
        if callable(getattr(v, "write", None)):
            return v
        raise ValueError("resource 必须是流名称、文件路径或可写对象")


class ErrorLogHandlerSettings(HandlerSettings):
    message_type: Annotated[
        Literal["operating_system", "sapi"], BeforeValidator(_to_message_type)
    ] = Field(default="operating_system", alias="messageType")
    expand_new_lines: bool = Field(default=False, alias="expandNewLines")
    address: Optional[StrictStr] = None


class SendGridHandlerSettings(HandlerSettings):
    api_user: NonEmptyStr = Field(alias="apiUser")
    api_key: NonEmptyStr = Field(alias="apiKey")
    sender: NonEmptyStr = Field(alias="from")
    to: Recipients
    subject: StrictStr


class MailerSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    host: NonEmptyStr
    port: int = 25
    username: Optional[StrictStr] = None
    password: Optional[StrictStr] = None
    secure: bool = False
    timeout: float = 5.0


class MailMessageSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    sender: NonEmptyStr = Field(alias="from")
    to: Recipients
    subject: StrictStr


class SwiftMailHandlerSettings(HandlerSettings):
    mailer: Annotated[MailerSettings, BeforeValidator(_to_mailer)]
    message: MailMessageSettings


class LoggerSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: NonEmptyStr = "app"
    handlers: Annotated[list[dict[str, Any]], BeforeValidator(_to_handler_list)] = Field(
        default_factory=list
    )


LOGGER = ResourceFamily(
    name="logger",
    aliases=("log", "logger", "monolog"),
    model=LoggerSettings,
)

HANDLER_TYPES: VariantRegistry[logging.Handler] = VariantRegistry("handler")


@HANDLER_TYPES.register("StreamHandler", StreamHandlerSettings)
def build_stream_handler(settings: StreamHandlerSettings) -> logging.Handler:
    resource = settings.resource
    if not isinstance(resource, str):
        return logging.StreamHandler(resource)
    if resource in STDOUT_RESOURCES:
        return logging.StreamHandler(sys.stdout)
    if resource in STDERR_RESOURCES:
        return logging.StreamHandler(sys.stderr)

    try:
        handler = logging.FileHandler(resource, encoding="utf-8")
    except OSError as exc:
        raise InvalidConfigurationError(
            f"无法打开日志文件 {resource!r}", field="resource"
        ) from exc

    if settings.file_permission is not None:
        try:
            os.chmod(resource, settings.file_permission)
        except OSError as exc:
            handler.close()
            raise InvalidConfigurationError(
                f"无法设置日志文件权限 {resource!r}", field="filePermission"
            ) from exc
    return handler


@HANDLER_TYPES.register("ErrorLogHandler", ErrorLogHandlerSettings)
def build_error_log_handler(settings: ErrorLogHandlerSettings) -> logging.Handler:
    try:
        return ErrorLogHandler(
            settings.message_type,
            expand_new_lines=settings.expand_new_lines,
            address=settings.address,
        )
    except OSError as exc:
        raise ProviderCreationError("无法连接系统日志") from exc


@HANDLER_TYPES.register("SendGridHandler", SendGridHandlerSettings)
def build_sendgrid_handler(settings: SendGridHandlerSettings) -> logging.Handler:
    return SendGridMailHandler(
        settings.api_user,
        settings.api_key,
        settings.sender,
        settings.to,
        settings.subject,
    )


@HANDLER_TYPES.register(
    "SwiftMailHandler", SwiftMailHandlerSettings, aliases=("SMTPHandler",)
)
def build_smtp_handler(settings: SwiftMailHandlerSettings) -> logging.Handler:
    mailer = settings.mailer
    credentials = None
    if mailer.username is not None:
        credentials = (mailer.username, mailer.password or "")
    return logging.handlers.SMTPHandler(
        mailhost=(mailer.host, mailer.port),
        fromaddr=settings.message.sender,
        toaddrs=list(settings.message.to),
        subject=settings.message.subject,
        credentials=credentials,
        secure=() if mailer.secure else None,
        timeout=mailer.timeout,
    )


def build_handler(section: Mapping[str, Any], *, label: str = "handler") -> logging.Handler:
    variant, settings = HANDLER_TYPES.resolve(section, label=label)
    handler = variant.build(settings)
    handler.setLevel(settings.level)
    handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    handler.bubble = settings.bubble  # type: ignore[attr-defined]
    return handler


def create_logger(settings: LoggerSettings) -> ServiceLogger:
    service_logger = ServiceLogger(settings.name)
    try:
        for index, section in enumerate(settings.handlers):
            service_logger.addHandler(
                build_handler(section, label=f"{LOGGER.name}.handlers[{index}]")
            )
    except ServiceProviderError:
        for handler in service_logger.handlers:
            handler.close()
        raise

    logger.info(
        "日志资源已创建",
        name=settings.name,
        handlers=[type(h).__name__ for h in service_logger.handlers],
    )
    return service_logger


def create_service_logger(source: ContainerConfigSource) -> ServiceLogger:
    return create_logger(resolve(source.get(), LOGGER))


class LoggerProvider(ServiceProvider):
    """`log`、`logger`、`monolog` 三个名称共享同一个 logger 实例。"""

    names = ("log", "logger", "monolog")

    def register(self, container: containers.Container) -> None:
        service_logger = providers.Singleton(
            create_service_logger, self.config_source(container)
        )
        self.bind(container, self.names, service_logger)

# src/service_providers/observability/logging_config.py
"""
集中配置库自身的诊断日志：structlog ⇄ 标准 logging。

提供两种输出：
- console：开发环境的人类友好输出（本地时间，Rich 异常回溯）。
- json   ：生产环境的结构化日志（ISO-8601 且 UTC）。

注意：这里配置的是库的诊断日志，与日志资源族构造出的 ServiceLogger 无关。
"""

from __future__ import annotations

import logging
from typing import Literal, Optional

import structlog
from structlog.typing import Processor

from service_providers.config import ProvidersSettings

PACKAGE_LOGGER = "service_providers"


def setup_logging(
    *,
    log_level: str = "INFO",
    log_format: Literal["json", "console"] = "console",
    root_level: Optional[str] = None,
    service: Optional[str] = None,
    silence_noisy_libs: bool = True,
) -> None:
    """
    配置全局 structlog 日志系统。

    Args:
        log_level: 本库 logger 的最低级别。
        log_format: 'console' 或 'json'。
        root_level: 根 logger 级别；默认 WARNING 以降低第三方噪声。
        service: 统一绑定到日志的服务名（通过 contextvars 注入）。
        silence_noisy_libs: 是否下调 httpx/amqp/sqlalchemy 等 logger 的级别。
    """
    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
    ]

    if log_format == "json":
        timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)
    else:
        timestamper = structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False)

    processors: list[Processor] = [
        *pre_chain,
        timestamper,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    final_renderer: Processor
    if log_format == "console":
        final_renderer = structlog.dev.ConsoleRenderer(
            exception_formatter=structlog.dev.rich_traceback
        )
    else:
        final_renderer = structlog.processors.JSONRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *([structlog.processors.format_exc_info] if log_format == "json" else []),
            final_renderer,
        ],
        foreign_pre_chain=[*pre_chain, timestamper],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel((root_level or "WARNING").upper())

    app_logger = logging.getLogger(PACKAGE_LOGGER)
    app_logger.setLevel(log_level.upper())
    app_logger.propagate = True

    structlog.contextvars.clear_contextvars()
    if service:
        structlog.contextvars.bind_contextvars(service=service)

    if silence_noisy_libs:
        for noisy in ("httpx", "httpcore", "amqp", "sqlalchemy.engine.Engine"):
            logging.getLogger(noisy).setLevel(logging.WARNING)

    structlog.get_logger(f"{PACKAGE_LOGGER}.logging_config").debug(
        "日志系统已配置完成。",
        log_format=log_format,
        app_log_level=log_level.upper(),
        root_log_level=(root_level or "WARNING").upper(),
    )


def setup_logging_from_settings(settings: ProvidersSettings) -> None:
    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        service=settings.service_name,
    )

# tests/unit/test_logging_config.py
"""
测试库诊断日志的 structlog 配置。
"""

import logging

import pytest
import structlog

from service_providers.bootstrap import create_container
from service_providers.config import LoggingSettings, ProvidersSettings
from service_providers.observability.logging_config import (
    PACKAGE_LOGGER,
    setup_logging,
    setup_logging_from_settings,
)

pytestmark = pytest.mark.usefixtures("restore_logging")


def test_json_format_installs_processor_formatter():
    setup_logging(log_level="DEBUG", log_format="json")
    root = logging.getLogger()
    assert len(root.handlers) == 1
    formatter = root.handlers[0].formatter
    assert isinstance(formatter, structlog.stdlib.ProcessorFormatter)
    assert isinstance(formatter.processors[-1], structlog.processors.JSONRenderer)
    assert logging.getLogger(PACKAGE_LOGGER).level == logging.DEBUG
    assert root.level == logging.WARNING


def test_console_format_uses_console_renderer():
    setup_logging(log_format="console", root_level="ERROR")
    formatter = logging.getLogger().handlers[0].formatter
    assert isinstance(formatter.processors[-1], structlog.dev.ConsoleRenderer)
    assert logging.getLogger().level == logging.ERROR


def test_service_is_bound_to_context():
    setup_logging(service="billing")
    assert structlog.contextvars.get_contextvars() == {"service": "billing"}


def test_noisy_libraries_are_silenced():
    logging.getLogger("httpx").setLevel(logging.DEBUG)
    setup_logging()
    assert logging.getLogger("httpx").level == logging.WARNING


def test_setup_from_settings(mocker):
    setup = mocker.patch("service_providers.observability.logging_config.setup_logging")
    settings = ProvidersSettings(service_name="svc", logging=LoggingSettings(level="ERROR", format="json"))
    setup_logging_from_settings(settings)
    setup.assert_called_once_with(log_level="ERROR", log_format="json", service="svc")


def test_container_resource_initializes_logging():
    settings = ProvidersSettings(service_name="svc", logging=LoggingSettings(level="DEBUG", format="json"))
    container = create_container(settings, config={})
    container.init_resources()
    try:
        formatter = logging.getLogger().handlers[0].formatter
        assert isinstance(formatter.processors[-1], structlog.processors.JSONRenderer)
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.DEBUG
        assert structlog.contextvars.get_contextvars() == {"service": "svc"}
    finally:
        container.shutdown_resources()

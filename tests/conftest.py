# tests/conftest.py
"""
Pytest 共享夹具。

- sqlite_database: 一份可直接构造的内存 SQLite 数据库配置；
- make_container: 以内存配置（或不绑定配置）创建并装配好的容器。
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any, Optional

import pytest
import structlog

from service_providers.bootstrap import create_container
from service_providers.containers import ApplicationContainer


@pytest.fixture
def sqlite_database() -> dict[str, Any]:
    return {"dsn": "sqlite::memory:", "username": "", "password": ""}


@pytest.fixture
def make_container() -> Iterator[Callable[..., ApplicationContainer]]:
    created: list[ApplicationContainer] = []

    def _make(config: Optional[dict[str, Any]] = None, **kwargs: Any) -> ApplicationContainer:
        container = create_container(config=config, **kwargs)
        created.append(container)
        return container

    yield _make

    for container in created:
        container.reset_singletons()


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """保存并恢复根 logger 状态与 structlog 全局配置。"""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()

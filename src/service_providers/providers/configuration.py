# src/service_providers/providers/configuration.py
"""
配置文件提供者：把 JSON / YAML / TOML 文件加载为 `config` 服务。
"""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Union

import structlog
import yaml
from dependency_injector import containers, providers

from service_providers.core.source import CONFIG_KEY
from service_providers.exceptions import InvalidConfigurationError
from service_providers.providers.base import ServiceProvider

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]


def _parse_json(text: str) -> Any:
    return json.loads(text)


def _parse_yaml(text: str) -> Any:
    return yaml.safe_load(text)


def _parse_toml(text: str) -> Any:
    return tomllib.loads(text)


PARSERS = {
    ".json": (_parse_json, json.JSONDecodeError),
    ".yaml": (_parse_yaml, yaml.YAMLError),
    ".yml": (_parse_yaml, yaml.YAMLError),
    ".toml": (_parse_toml, tomllib.TOMLDecodeError),
}


def load_configuration_file(filename: PathLike) -> Mapping[str, Any]:
    """读取并解析配置文件；顶层必须是映射。"""
    path = Path(filename)
    suffix = path.suffix.lower()
    if suffix not in PARSERS:
        raise InvalidConfigurationError(
            f"不支持的配置文件格式 {suffix or '<无扩展名>'}：{path}"
            f"（可用：{', '.join(sorted(PARSERS))}）"
        )
    parse, parse_error = PARSERS[suffix]

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidConfigurationError(f"无法读取配置文件：{path}") from exc

    try:
        data = parse(text)
    except parse_error as exc:
        raise InvalidConfigurationError(f"配置文件解析失败：{path}") from exc

    if not isinstance(data, Mapping):
        raise InvalidConfigurationError(
            f"配置文件顶层必须是映射，实际为 {type(data).__name__}：{path}"
        )
    logger.debug("配置文件已加载", path=str(path), keys=sorted(data))
    return data


class ConfigurationFile(ServiceProvider):
    """以 `config` 名称注册配置文件内容；首次取值时读取一次。"""

    def __init__(self, filename: PathLike) -> None:
        self.filename = Path(filename)

    def register(self, container: containers.Container) -> None:
        self.bind(
            container,
            (CONFIG_KEY,),
            providers.Singleton(load_configuration_file, self.filename),
        )

# src/service_providers/config.py
"""
库自身的运行配置（Pydantic v2 + pydantic-settings）。

环境变量前缀 SERVICE_PROVIDERS_，嵌套字段以 "__" 分隔，例如：
  SERVICE_PROVIDERS_CONFIG_FILE=config/app.yaml
  SERVICE_PROVIDERS_LOGGING__LEVEL=DEBUG
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    format: Literal["console", "json"] = Field(default="console")


class ProvidersSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SERVICE_PROVIDERS_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    config_file: Optional[Path] = Field(
        default=None, description="应用配置文件（JSON / YAML / TOML），绑定为 `config` 服务"
    )
    service_name: str = Field(default="service-providers")
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

# src/service_providers/config_loader.py
"""
配置装载器

职责：
- 加载 .env / .env.test；
- 构造 ProvidersSettings。
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv

from service_providers.config import ProvidersSettings

__all__ = ["load_settings"]


def _load_env_files(mode: Literal["test", "prod"], base_dir: Path) -> None:
    """
    - test 模式：先加载 .env（override=False），再加载 .env.test（override=True）
    - prod 模式：仅加载 .env（override=False）
    """
    env_path = base_dir / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=False)

    if mode == "test":
        env_test_path = base_dir / ".env.test"
        if env_test_path.exists():
            load_dotenv(env_test_path, override=True)


def load_settings(
    mode: Literal["test", "prod"] = "prod", base_dir: Optional[Path] = None
) -> ProvidersSettings:
    _load_env_files(mode, base_dir or Path.cwd())
    return ProvidersSettings()

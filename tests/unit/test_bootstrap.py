# tests/unit/test_bootstrap.py
"""
测试容器装配与库自身配置（pydantic-settings + python-dotenv）。
"""

import pytest

from service_providers.bootstrap import create_container, default_service_providers
from service_providers.config import ProvidersSettings
from service_providers.config_loader import load_settings
from service_providers.exceptions import MissingDependencyError
from service_providers.providers import DatabaseProvider

ALL_NAMES = (
    "pdo",
    "database",
    "log",
    "logger",
    "monolog",
    "amqp",
    "rabbitmq",
    "AMQPConnection",
    "sendgrid",
    "SendGrid",
    "sendgridFactory",
    "SendGridFactory",
    "paths",
    "urls",
)


def test_default_providers_register_every_name(make_container):
    container = make_container({})
    for name in ALL_NAMES:
        assert name in container.providers, name
    assert "config" in container.providers


def test_registration_does_not_read_configuration(make_container):
    """没有配置也能完成注册；错误推迟到取值时。"""
    container = make_container()
    assert "config" not in container.providers
    with pytest.raises(MissingDependencyError):
        container.database()


def test_custom_provider_list(make_container):
    container = make_container({}, service_providers=[DatabaseProvider()])
    assert "pdo" in container.providers
    assert "log" not in container.providers


def test_in_memory_config_wins_over_config_file(tmp_path):
    settings = ProvidersSettings(config_file=tmp_path / "absent.yaml")
    container = create_container(settings, config={"paths": {"a": "b"}})
    assert container.paths()("a") == "b"


def test_settings_are_exposed(make_container):
    container = create_container(ProvidersSettings(service_name="billing"), config={})
    assert container.settings().service_name == "billing"


def test_default_service_providers_are_fresh_instances():
    assert default_service_providers()[0] is not default_service_providers()[0]


class TestSettings:
    def test_env_prefix_and_nested_delimiter(self, monkeypatch):
        monkeypatch.setenv("SERVICE_PROVIDERS_LOGGING__LEVEL", "DEBUG")
        monkeypatch.setenv("SERVICE_PROVIDERS_LOGGING__FORMAT", "json")
        monkeypatch.setenv("SERVICE_PROVIDERS_CONFIG_FILE", "/etc/app.yaml")
        settings = ProvidersSettings()
        assert settings.logging.level == "DEBUG"
        assert settings.logging.format == "json"
        assert str(settings.config_file) == "/etc/app.yaml"

    def test_load_settings_reads_dotenv_files(self, tmp_path, monkeypatch):
        # 先 setenv 再 delenv，确保测试结束后变量被清理
        monkeypatch.setenv("SERVICE_PROVIDERS_SERVICE_NAME", "placeholder")
        monkeypatch.delenv("SERVICE_PROVIDERS_SERVICE_NAME")
        (tmp_path / ".env").write_text("SERVICE_PROVIDERS_SERVICE_NAME=from-env\n", encoding="utf-8")
        (tmp_path / ".env.test").write_text("SERVICE_PROVIDERS_SERVICE_NAME=from-env-test\n", encoding="utf-8")

        assert load_settings("test", base_dir=tmp_path).service_name == "from-env-test"

    def test_prod_mode_ignores_env_test(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SERVICE_PROVIDERS_SERVICE_NAME", "placeholder")
        monkeypatch.delenv("SERVICE_PROVIDERS_SERVICE_NAME")
        (tmp_path / ".env").write_text("SERVICE_PROVIDERS_SERVICE_NAME=from-env\n", encoding="utf-8")
        (tmp_path / ".env.test").write_text("SERVICE_PROVIDERS_SERVICE_NAME=from-env-test\n", encoding="utf-8")

        assert load_settings("prod", base_dir=tmp_path).service_name == "from-env"

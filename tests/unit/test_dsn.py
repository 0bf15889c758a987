# tests/unit/test_dsn.py
"""
测试 PDO 风格 DSN 到 SQLAlchemy URL 的转换。
"""

import pytest

from service_providers.exceptions import InvalidConfigurationError
from service_providers.providers.dsn import to_url


@pytest.mark.parametrize("dsn", ["sqlite::memory:", "sqlite:"])
def test_sqlite_memory(dsn):
    url = to_url(dsn)
    assert url.drivername == "sqlite"
    assert url.database is None


def test_sqlite_file_path():
    url = to_url("sqlite:/var/data/app.db")
    assert url.database == "/var/data/app.db"


def test_pgsql_dsn_is_translated():
    url = to_url("pgsql:host=db.local;port=5433;dbname=app;sslmode=require", "svc", "s3cret")
    assert url.drivername == "postgresql"
    assert url.host == "db.local"
    assert url.port == 5433
    assert url.database == "app"
    assert url.username == "svc"
    assert url.password == "s3cret"
    assert url.query == {"sslmode": "require"}


def test_empty_credentials_are_omitted():
    url = to_url("mysql:host=localhost;dbname=app", "", "")
    assert url.drivername == "mysql"
    assert url.username is None
    assert url.password is None


def test_sqlalchemy_url_is_passed_through_with_injected_credentials():
    url = to_url("postgresql+psycopg://db.local/app", "svc", "pw")
    assert url.drivername == "postgresql+psycopg"
    assert url.username == "svc"
    assert url.password == "pw"


def test_sqlalchemy_url_credentials_take_precedence():
    url = to_url("postgresql://owner:x@db.local/app", "svc", "pw")
    assert url.username == "owner"


@pytest.mark.parametrize(
    "dsn",
    [
        "nosuchdriver:host=x",
        "just-text",
        "pgsql:host=x;garbage",
        "pgsql:host=x;port=abc",
        "::bad://",
    ],
)
def test_malformed_dsn_is_invalid(dsn):
    with pytest.raises(InvalidConfigurationError) as exc_info:
        to_url(dsn)
    assert exc_info.value.field == "dsn"

# src/service_providers/providers/dsn.py
"""
DSN 转换：把 PDO 风格的 DSN（`pgsql:host=...;dbname=...`）翻译为 SQLAlchemy URL。

已是 SQLAlchemy URL（含 `://`）的 DSN 原样解析，仅在 URL 未携带凭据时注入用户名/密码。
"""

from __future__ import annotations

from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

from service_providers.exceptions import InvalidConfigurationError

PDO_DRIVERS: dict[str, str] = {
    "pgsql": "postgresql",
    "mysql": "mysql",
    "sqlsrv": "mssql",
    "oci": "oracle",
    "sqlite": "sqlite",
}


def _parse_pairs(body: str, dsn: str) -> dict[str, str]:
    pairs: dict[str, str] = {}
    for chunk in body.split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        key, sep, value = chunk.partition("=")
        if not sep or not key.strip():
            raise InvalidConfigurationError(
                f"DSN 片段 {chunk!r} 不是 key=value 形式：{dsn!r}", field="dsn"
            )
        pairs[key.strip()] = value.strip()
    return pairs


def _with_credentials(url: URL, username: str, password: str) -> URL:
    if url.username is not None or not username:
        return url
    return url.set(username=username, password=password or None)


def to_url(dsn: str, username: str = "", password: str = "") -> URL:
    if "://" in dsn:
        try:
            url = make_url(dsn)
        except ArgumentError as exc:
            raise InvalidConfigurationError(f"无法解析数据库 URL：{dsn!r}", field="dsn") from exc
        return _with_credentials(url, username, password)

    prefix, sep, body = dsn.partition(":")
    backend = PDO_DRIVERS.get(prefix.strip().lower()) if sep else None
    if backend is None:
        raise InvalidConfigurationError(
            f"不支持的 DSN 驱动前缀：{dsn!r}（可用：{', '.join(sorted(PDO_DRIVERS))}）",
            field="dsn",
        )

    if backend == "sqlite":
        # sqlite::memory: 与 sqlite: 都表示内存库
        if body in ("", ":memory:"):
            return URL.create("sqlite")
        return URL.create("sqlite", database=body)

    params = _parse_pairs(body, dsn)
    host = params.pop("host", None)
    database = params.pop("dbname", None)
    raw_port = params.pop("port", None)
    try:
        port = int(raw_port) if raw_port else None
    except ValueError as exc:
        raise InvalidConfigurationError(
            f"DSN 端口不是整数：{raw_port!r}", field="dsn"
        ) from exc

    return URL.create(
        backend,
        username=username or None,
        password=password or None,
        host=host,
        port=port,
        database=database,
        query=params,
    )

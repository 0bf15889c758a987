# src/service_providers/infrastructure/sendgrid_client.py
"""
SendGrid v3 Web API 的 httpx 客户端封装。

只负责构造带认证头的 httpx.Client 与拼装 /v3/mail/send 请求体，
不做重试；发送失败由 httpx 原样抛出。
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Optional

import httpx

SENDGRID_HOST = "https://api.sendgrid.com"
MAIL_SEND_PATH = "/v3/mail/send"
DEFAULT_TIMEOUT = 10.0


def create_sendgrid_client(
    api_key: str, options: Optional[Mapping[str, Any]] = None
) -> httpx.Client:
    """
    构造指向 SendGrid API 的 httpx.Client。

    options 支持：
      - host：API 根地址（默认 https://api.sendgrid.com）；
      - impersonate_subuser：以子账号身份发送（On-Behalf-Of 头）；
      - headers：附加请求头；
      - 其余键原样透传给 httpx.Client（timeout、transport、proxy 等）。
    """
    opts = dict(options or {})
    host = opts.pop("host", SENDGRID_HOST)
    subuser = opts.pop("impersonate_subuser", None)

    headers = {
        "Authorization": f"Bearer {api_key}",
        "Accept": "application/json",
    }
    headers.update(opts.pop("headers", None) or {})
    if subuser:
        headers["On-Behalf-Of"] = subuser

    opts.setdefault("timeout", DEFAULT_TIMEOUT)
    return httpx.Client(base_url=host, headers=headers, **opts)


def build_mail_payload(
    *,
    sender: str,
    recipients: Iterable[str],
    subject: str,
    content: str,
    content_type: str = "text/plain",
) -> dict[str, Any]:
    return {
        "personalizations": [{"to": [{"email": address} for address in recipients]}],
        "from": {"email": sender},
        "subject": subject,
        "content": [{"type": content_type, "value": content}],
    }


def send_mail(client: httpx.Client, **message: Any) -> httpx.Response:
    response = client.post(MAIL_SEND_PATH, json=build_mail_payload(**message))
    response.raise_for_status()
    return response

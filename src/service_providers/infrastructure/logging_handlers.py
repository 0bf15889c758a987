# src/service_providers/infrastructure/logging_handlers.py
"""
日志资源族使用的标准库 logging 扩展。

- ServiceLogger：独立 logger（不注册到全局 Manager），处理器按声明顺序执行，
  `bubble=False` 的处理器处理完记录后阻止其继续传递给后续处理器；
- ErrorLogHandler：写入系统日志（syslog）或进程 stderr，可按行拆分多行消息；
- SendGridMailHandler：每条记录通过 SendGrid API 发送一封邮件。
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from collections.abc import Sequence
from typing import Literal, Optional, Union

import httpx

from service_providers.infrastructure.sendgrid_client import (
    create_sendgrid_client,
    send_mail,
)

SYSLOG_SOCKET = "/dev/log"

MessageType = Literal["operating_system", "sapi"]
SyslogAddress = Union[str, tuple[str, int]]


class ServiceLogger(logging.Logger):
    """由服务提供者构造的独立 logger，不会出现在 logging.getLogger 的命名空间中。"""

    def __init__(self, name: str, level: int = logging.NOTSET) -> None:
        super().__init__(name, level)
        self.propagate = False

    def callHandlers(self, record: logging.LogRecord) -> None:
        for handler in self.handlers:
            if record.levelno < handler.level:
                continue
            handler.handle(record)
            if not getattr(handler, "bubble", True):
                break


def syslog_address(address: Optional[str] = None) -> SyslogAddress:
    """`host:port` → UDP 地址元组；其他字符串视为 UNIX 套接字路径。"""
    if address:
        host, sep, port = address.rpartition(":")
        if sep and host and port.isdigit():
            return host, int(port)
        return address
    if os.path.exists(SYSLOG_SOCKET):
        return SYSLOG_SOCKET
    return "localhost", logging.handlers.SYSLOG_UDP_PORT


class ErrorLogHandler(logging.Handler):
    def __init__(
        self,
        message_type: MessageType = "operating_system",
        *,
        expand_new_lines: bool = False,
        address: Optional[str] = None,
        level: int = logging.NOTSET,
    ) -> None:
        super().__init__(level)
        self.message_type = message_type
        self.expand_new_lines = expand_new_lines
        target: logging.Handler
        if message_type == "sapi":
            target = logging.StreamHandler(sys.stderr)
        else:
            target = logging.handlers.SysLogHandler(address=syslog_address(address))
        target.setFormatter(logging.Formatter("%(message)s"))
        self.target = target

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            lines = message.splitlines() if self.expand_new_lines else [message]
            for line in lines:
                if not line:
                    continue
                self.target.emit(
                    logging.makeLogRecord(
                        {
                            "name": record.name,
                            "levelno": record.levelno,
                            "levelname": record.levelname,
                            "msg": line,
                        }
                    )
                )
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        self.target.close()
        super().close()


class SendGridMailHandler(logging.Handler):
    def __init__(
        self,
        api_user: str,
        api_key: str,
        sender: str,
        recipients: Sequence[str],
        subject: str,
        *,
        level: int = logging.NOTSET,
        client: Optional[httpx.Client] = None,
    ) -> None:
        super().__init__(level)
        self.api_user = api_user
        self.sender = sender
        self.recipients = tuple(recipients)
        self.subject = subject
        self._owns_client = client is None
        self.client = client if client is not None else create_sendgrid_client(api_key)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            send_mail(
                self.client,
                sender=self.sender,
                recipients=self.recipients,
                subject=self.subject,
                content=self.format(record),
            )
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()
        super().close()

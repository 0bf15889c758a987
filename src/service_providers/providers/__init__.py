# src/service_providers/providers/__init__.py
"""
各资源族的服务提供者。
"""

from .amqp import AmqpConnectionFactory, AmqpProvider
from .base import ServiceProvider
from .configuration import ConfigurationFile, load_configuration_file
from .database import DatabaseConnector, DatabaseProvider
from .logger import LoggerProvider
from .named_strings import NamedStringLookup, NamedStringProvider, PathsProvider, UrlsProvider
from .sendgrid import SendGridProvider

__all__ = [
    "AmqpConnectionFactory",
    "AmqpProvider",
    "ConfigurationFile",
    "DatabaseConnector",
    "DatabaseProvider",
    "LoggerProvider",
    "NamedStringLookup",
    "NamedStringProvider",
    "PathsProvider",
    "ServiceProvider",
    "SendGridProvider",
    "UrlsProvider",
    "load_configuration_file",
]

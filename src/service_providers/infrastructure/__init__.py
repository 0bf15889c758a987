# src/service_providers/infrastructure/__init__.py

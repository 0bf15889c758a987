# src/service_providers/observability/__init__.py

# src/service_providers/presentation/__init__.py

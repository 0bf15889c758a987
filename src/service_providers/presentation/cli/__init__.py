# src/service_providers/presentation/cli/__init__.py

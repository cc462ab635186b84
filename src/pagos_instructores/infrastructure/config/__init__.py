"""Módulo de configuración."""
from pagos_instructores.infrastructure.config.settings import Settings, get_settings
from pagos_instructores.infrastructure.config.logging import setup_logging, logger

__all__ = ["Settings", "get_settings", "setup_logging", "logger"]

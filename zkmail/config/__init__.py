"""
Configuration Module
====================

Centralized configuration management using Pydantic Settings.
Loads from environment variables with type validation and defaults.

Usage:
    from zkmail.config import settings

    print(settings.prover.mode)
    print(settings.email.trusted_domains_list)
"""

from zkmail.config.settings import (
    CircuitSettings,
    EmailSettings,
    Environment,
    LogLevel,
    ProverMode,
    ProverSettings,
    Settings,
    get_settings,
)


# Global settings instance (singleton)
settings = get_settings()

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "Environment",
    "LogLevel",
    "ProverMode",
    "ProverSettings",
    "EmailSettings",
    "CircuitSettings",
]

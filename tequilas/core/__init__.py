"""
Core module initialization.
Exports configuration, logging and error utilities.
"""

from tequilas.core.config import get_settings, setup_logging, Settings, EnvironmentMode
from tequilas.core.errors import (
    AppError,
    ValidationFailed,
    Unauthenticated,
    Forbidden,
    NotFound,
    Conflict,
    ServiceUnavailable,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "AppError",
    "ValidationFailed",
    "Unauthenticated",
    "Forbidden",
    "NotFound",
    "Conflict",
    "ServiceUnavailable",
]

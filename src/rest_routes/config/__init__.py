"""
Configuration module
"""

from rest_routes.config.client_config import (
    ClientConfig,
    ConfigDefaults,
)
from rest_routes.config.config_loader import ConfigLoader
from rest_routes.config.config_validator import (
    ConfigValidator,
    ValidationResult,
    ValidationErrorDetail,
)

__all__ = [
    "ClientConfig",
    "ConfigDefaults",
    "ConfigLoader",
    "ConfigValidator",
    "ValidationResult",
    "ValidationErrorDetail",
]

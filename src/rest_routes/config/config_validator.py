"""
Configuration Validator
Validates client configuration with clear error messages
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ValidationErrorDetail:
    """Validation error detail"""
    field: str
    message: str
    value: Optional[Any] = None


@dataclass
class ValidationResult:
    """Validation result"""
    valid: bool
    errors: List[ValidationErrorDetail] = field(default_factory=list)


class ConfigValidator:
    """
    ConfigValidator class
    Provides validation for client configuration dictionaries
    """

    def __init__(self) -> None:
        self._errors: List[ValidationErrorDetail] = []

    def validate(self, config: Dict[str, Any]) -> ValidationResult:
        """
        Validate the entire configuration dictionary

        Args:
            config: Configuration dictionary to validate

        Returns:
            ValidationResult with any errors
        """
        self._errors = []

        self._validate_base_url(config)
        self._validate_headers(config)
        self._validate_flags(config)

        return ValidationResult(
            valid=len(self._errors) == 0,
            errors=self._errors.copy()
        )

    def validate_or_raise(self, config: Dict[str, Any]) -> None:
        """
        Validate and raise if invalid

        Raises:
            ConfigError: If configuration is invalid
        """
        from rest_routes.exceptions import ConfigError

        result = self.validate(config)
        if not result.valid:
            error_messages = "; ".join(
                f"{e.field}: {e.message}" for e in result.errors
            )
            raise ConfigError(
                f"Configuration validation failed: {error_messages}",
                details={"errors": [e.field for e in result.errors]},
            )

    def _validate_base_url(self, config: Dict[str, Any]) -> None:
        """Validate base_url is present and uses an HTTP scheme"""
        base_url = config.get("base_url")
        if base_url is None:
            self._errors.append(ValidationErrorDetail(
                field="base_url",
                message="base_url is required"
            ))
            return

        if not isinstance(base_url, str):
            self._errors.append(ValidationErrorDetail(
                field="base_url",
                message="base_url must be a string",
                value=base_url
            ))
        elif base_url.strip() == "":
            self._errors.append(ValidationErrorDetail(
                field="base_url",
                message="base_url cannot be empty",
                value=base_url
            ))
        elif not base_url.strip().startswith(("http://", "https://")):
            self._errors.append(ValidationErrorDetail(
                field="base_url",
                message="base_url must be a valid HTTP/HTTPS URL",
                value=base_url
            ))

    def _validate_headers(self, config: Dict[str, Any]) -> None:
        """Validate default_headers is a mapping of strings"""
        headers = config.get("default_headers")
        if headers is None:
            return

        if not isinstance(headers, dict):
            self._errors.append(ValidationErrorDetail(
                field="default_headers",
                message="default_headers must be a mapping",
                value=headers
            ))
            return

        for name, value in headers.items():
            if not isinstance(name, str) or name.strip() == "":
                self._errors.append(ValidationErrorDetail(
                    field="default_headers",
                    message="header names must be non-empty strings",
                    value=name
                ))
            elif not isinstance(value, str):
                self._errors.append(ValidationErrorDetail(
                    field=f"default_headers.{name}",
                    message="header values must be strings",
                    value=value
                ))

    def _validate_flags(self, config: Dict[str, Any]) -> None:
        """Validate boolean flags"""
        enable_audit_log = config.get("enable_audit_log")
        if enable_audit_log is not None and not isinstance(enable_audit_log, bool):
            self._errors.append(ValidationErrorDetail(
                field="enable_audit_log",
                message="enable_audit_log must be a boolean",
                value=enable_audit_log
            ))

"""
Client Configuration Types and Schema
Type-safe configuration objects for the REST client
"""

from typing import Dict

from pydantic import BaseModel, Field, field_validator


class ConfigDefaults:
    """Default configuration values"""
    DEFAULT_HEADERS: Dict[str, str] = {"Content-Type": "application/json"}
    ENABLE_AUDIT_LOG = True


class ClientConfig(BaseModel):
    """
    Main client configuration class

    Immutable once created; a client built from it shares the same
    base URL and default headers across every call.
    """

    base_url: str = Field(
        ...,
        description="Base address every path template is appended to",
        min_length=1,
    )
    default_headers: Dict[str, str] = Field(
        default_factory=dict,
        description="Headers sent with every request unless overridden per call",
    )
    enable_audit_log: bool = Field(
        default=ConfigDefaults.ENABLE_AUDIT_LOG,
        description="Emit an audit entry for every request",
    )

    model_config = {
        "str_strip_whitespace": True,
        "frozen": True,
    }

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate base_url is an HTTP/HTTPS URL"""
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must be a valid HTTP/HTTPS URL")
        return v


"""
Exceptions raised by the leveling API.

Only administrative misuse raises (a bad player id, a missing required
config key). Gameplay input does not: the processor logs and drops bad
kills, and levels outside 0..max_level are clamped.

Every exception carries a `message`, structured `details`, a `severity`
that log handlers can act on, and a stable `error_code`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class BloodcraftDomainException(Exception):
    """Root of the leveling exception tree."""

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        error_code: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})
        self.severity = severity or self.DEFAULT_SEVERITY
        self.error_code = error_code or type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        """Flat form for `logger.*(..., extra=exc.to_dict())`."""
        return {
            "error_type": type(self).__name__,
            "error_code": self.error_code,
            "error_message": self.message,
            "details": self.details,
            "severity": self.severity.value,
        }

    def __str__(self) -> str:
        if not self.details:
            return f"[{self.error_code}] {self.message}"
        return f"[{self.error_code}] {self.message} | Details: {self.details}"


class ValidationError(BloodcraftDomainException):
    """An administrative call passed an impossible value for `field`."""

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.validation_message = message
        super().__init__(
            f"Validation error for {field}: {message}",
            details={"field": field, "validation_message": message},
            error_code=f"VALIDATION_{field.upper()}",
        )


class ConfigurationError(BloodcraftDomainException):
    """A configuration key a service cannot run without is missing."""

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self, config_key: str, message: str) -> None:
        self.config_key = config_key
        super().__init__(
            f"Configuration error for {config_key}: {message}",
            details={"config_key": config_key, "message": message},
            error_code="CONFIG_ERROR",
        )


__all__ = [
    "ErrorSeverity",
    "BloodcraftDomainException",
    "ValidationError",
    "ConfigurationError",
]

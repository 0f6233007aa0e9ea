"""
Shared building blocks for Bloodcraft modules: service base class,
domain exceptions and validators.
"""

from .base_service import BaseService
from .exceptions import (
    BloodcraftDomainException,
    ConfigurationError,
    ErrorSeverity,
    ValidationError,
)
from .validators import (
    is_valid_experience,
    is_valid_level,
    is_valid_player_id,
    validate_player_id,
)

__all__ = [
    "BaseService",
    "BloodcraftDomainException",
    "ConfigurationError",
    "ErrorSeverity",
    "ValidationError",
    "is_valid_experience",
    "is_valid_level",
    "is_valid_player_id",
    "validate_player_id",
]

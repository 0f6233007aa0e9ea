"""
Invariant checks shared by the leveling domain models.

Models reject impossible states when they are built. Clamping and skipping
of gameplay input happen earlier, in the experience processor.
"""

from __future__ import annotations

import math
from typing import Any, Optional, Union

Number = Union[int, float]


class DomainValidationError(Exception):
    """A model was built with a value that breaks one of its invariants."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.field = field
        self.value = value


def _reject(field_name: str, value: Any, requirement: str) -> DomainValidationError:
    return DomainValidationError(
        f"{field_name} must be {requirement}, got {value!r}",
        field=field_name,
        value=value,
    )


def validate_non_negative(value: Number, field_name: str) -> None:
    if value < 0:
        raise _reject(field_name, value, "non-negative")


def validate_finite(value: Number, field_name: str) -> None:
    if not math.isfinite(value):
        raise _reject(field_name, value, "finite")


def validate_range(value: Number, min_val: Number, max_val: Number, field_name: str) -> None:
    """Inclusive on both ends. Non-numeric values are rejected too."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _reject(field_name, value, "a number")
    if not min_val <= value <= max_val:
        raise _reject(field_name, value, f"between {min_val} and {max_val}")

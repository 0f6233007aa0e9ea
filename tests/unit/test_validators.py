"""
Unit tests for shared validators and domain exceptions.
"""

import logging

import pytest

from bloodcraft.modules.shared.exceptions import ErrorSeverity, ValidationError
from bloodcraft.modules.shared.validators import (
    is_valid_experience,
    is_valid_level,
    is_valid_player_id,
    validate_player_id,
)


@pytest.mark.unit
class TestPredicates:
    @pytest.mark.parametrize(
        "level,expected",
        [(0, True), (50, True), (100, True), (101, False), (-1, False), (True, False), (5.0, False)],
    )
    def test_is_valid_level(self, level, expected):
        assert is_valid_level(level, 100) is expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            (0, True),
            (12.5, True),
            (-1, False),
            (float("nan"), False),
            (float("inf"), False),
            ("10", False),
            (None, False),
        ],
    )
    def test_is_valid_experience(self, value, expected):
        assert is_valid_experience(value) is expected

    def test_is_valid_player_id(self):
        assert is_valid_player_id(76561198000000001)
        assert is_valid_player_id(2**64 - 1)
        assert not is_valid_player_id(2**64)
        assert not is_valid_player_id(-1)
        assert not is_valid_player_id("76561198000000001")


@pytest.mark.unit
def test_validate_player_id_raises_structured_error():
    with pytest.raises(ValidationError) as exc_info:
        validate_player_id(-7)

    error = exc_info.value
    assert error.field == "player_id"
    assert error.error_code == "VALIDATION_PLAYER_ID"
    assert error.severity is ErrorSeverity.INFO
    assert error.to_dict()["details"]["field"] == "player_id"


@pytest.mark.unit
def test_error_dict_can_be_logged_as_extra(caplog):
    error = ValidationError("player_id", "must be an integer")
    log = logging.getLogger("tests.validators")

    with caplog.at_level(logging.INFO, logger="tests.validators"):
        log.info("Admin call rejected", extra=error.to_dict())

    record = caplog.records[-1]
    assert record.getMessage() == "Admin call rejected"
    assert record.error_message == "Validation error for player_id: must be an integer"
    assert record.error_code == "VALIDATION_PLAYER_ID"

"""
Tests for PIN format rules and the keyed PIN digest.
"""
import pytest

from timeclock.core.exceptions import ValidationError
from timeclock.core.security import get_pin_digest, validate_pin_strength
from timeclock.services.user_service import validate_pin


@pytest.mark.parametrize("pin", ["2580", "13579", "918273", "0246"])
def test_valid_pins(pin):
    assert validate_pin_strength(pin) == (True, None)


@pytest.mark.parametrize(
    "pin, message",
    [
        ("123", "PIN must be 4-6 digits"),
        ("1234567", "PIN must be 4-6 digits"),
        ("12a4", "PIN must contain only numbers"),
        ("1111", "PIN is too weak. Please choose a different PIN"),
        ("1234", "PIN is too weak. Please choose a different PIN"),
        ("23456", "PIN cannot be sequential (e.g., 12345)"),
        ("6543", "PIN cannot be sequential (e.g., 12345)"),
    ],
)
def test_invalid_pins(pin, message):
    assert validate_pin_strength(pin) == (False, message)


def test_validate_pin_raises_validation_error():
    with pytest.raises(ValidationError) as exc_info:
        validate_pin("0000")
    assert exc_info.value.status_code == 400
    assert exc_info.value.kind == "validation"


def test_pin_digest_is_deterministic_and_keyed():
    digest = get_pin_digest("2580")
    assert digest == get_pin_digest("2580")
    assert digest != get_pin_digest("2581")
    assert len(digest) == 64
    assert "2580" not in digest

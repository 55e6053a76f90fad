from datetime import datetime, timedelta, timezone
from typing import Optional
import hashlib
import hmac
import logging

from jose import JWTError, jwt
from timeclock.core.config import settings

logger = logging.getLogger(__name__)

WEAK_PINS = {
    "0000", "1111", "2222", "3333", "4444", "5555", "6666", "7777", "8888", "9999",
    "1234", "4321", "0123", "9876", "1122", "2233", "3344", "4455", "5566", "6677", "7788", "8899",
}


def get_pin_digest(pin: str) -> str:
    """
    Keyed digest of a PIN.

    Deterministic so it can be looked up and carry a unique index, keyed with
    SECRET_KEY so a leaked table does not reveal PINs by brute force alone.
    """
    return hmac.new(
        settings.SECRET_KEY.encode("utf-8"),
        pin.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def _is_sequential(pin: str) -> bool:
    step = int(pin[1]) - int(pin[0])
    if abs(step) != 1:
        return False
    return all(int(b) - int(a) == step for a, b in zip(pin, pin[1:]))


def validate_pin_strength(pin: str) -> tuple[bool, Optional[str]]:
    """Validate PIN format and strength. Returns (is_valid, error_message)."""
    if len(pin) < 4 or len(pin) > 6:
        return False, "PIN must be 4-6 digits"
    if not pin.isdigit():
        return False, "PIN must contain only numbers"
    if pin in WEAK_PINS:
        return False, "PIN is too weak. Please choose a different PIN"
    if _is_sequential(pin):
        return False, "PIN cannot be sequential (e.g., 12345)"
    return True, None


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token (used by the session service and by tests)."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify a JWT token."""
    if not token or not isinstance(token, str) or not token.strip():
        return None

    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.debug(f"JWT decode error: {str(e)}")
        return None


def normalize_email(email: str) -> str:
    """Normalize email address (lowercase, trim)."""
    return email.lower().strip()

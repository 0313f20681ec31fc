"""Input validation utilities.

Security design:
1. Length checks FIRST (before any decoding)
2. Character-set checks instead of regex
3. Defense in depth (validate at the tool boundary and in the client)
"""

from __future__ import annotations

from typing import Any

import base58

from .errors import ValidationError

# =============================================================================
# Constants
# =============================================================================

BASE58_ALPHABET = frozenset(
    "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
)

PUBKEY_LENGTH = 32            # Decoded public key size in bytes
MIN_PUBKEY_STR_LENGTH = 32    # Shortest base58 encoding of 32 bytes
MAX_PUBKEY_STR_LENGTH = 44    # Longest base58 encoding of 32 bytes
MAX_LOG_VALUE_LENGTH = 500

SENSITIVE_FIELDS = ("token", "key", "secret", "password", "rpc_url")


# =============================================================================
# Length Validation
# =============================================================================

def validate_no_null_bytes(value: str, field: str) -> None:
    """Reject null bytes in string input.

    Raises:
        ValidationError: If input contains null bytes
    """
    if "\x00" in value:
        raise ValidationError(f"{field} contains invalid null byte")


def validate_length(value: str | None, max_length: int, field: str) -> None:
    """Validate input length and check for null bytes.

    Must be called before any decoding of untrusted input.

    Raises:
        ValidationError: If input exceeds max_length or contains null bytes
    """
    if value is not None and isinstance(value, str):
        if len(value) > max_length:
            raise ValidationError(f"{field} exceeds maximum length of {max_length} characters")
        validate_no_null_bytes(value, field)


# =============================================================================
# Program Id Validation
# =============================================================================

def validate_program_id(value: Any, field: str = "program_id") -> str:
    """Validate a Solana account address and return it normalized.

    The address must be a base58 string that decodes to exactly 32 bytes.

    Args:
        value: Raw input from the tool call
        field: Field name for error messages

    Returns:
        The stripped base58 address

    Raises:
        ValidationError: If the value is not a valid 32-byte base58 key
    """
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")

    # 1. Length check FIRST
    validate_length(value, MAX_PUBKEY_STR_LENGTH + 16, field)

    value = value.strip()
    if not value:
        raise ValidationError(f"{field} cannot be empty")

    if not MIN_PUBKEY_STR_LENGTH <= len(value) <= MAX_PUBKEY_STR_LENGTH:
        raise ValidationError(
            f"{field} must be {MIN_PUBKEY_STR_LENGTH}-{MAX_PUBKEY_STR_LENGTH} "
            f"base58 characters, got {len(value)}"
        )

    # 2. Alphabet check (rejects 0, O, I, l and non-ASCII lookalikes)
    if not all(c in BASE58_ALPHABET for c in value):
        raise ValidationError(f"{field} contains non-base58 characters")

    # 3. Decoded size
    try:
        decoded = base58.b58decode(value)
    except ValueError as e:
        raise ValidationError(f"{field} is not valid base58") from e

    if len(decoded) != PUBKEY_LENGTH:
        raise ValidationError(
            f"{field} must decode to {PUBKEY_LENGTH} bytes, got {len(decoded)}"
        )

    return value


# =============================================================================
# Log Sanitization
# =============================================================================

def sanitize_for_log(value: Any) -> Any:
    """Sanitize value for safe logging.

    Security: Prevents log injection and sensitive data exposure.
    """
    if isinstance(value, str):
        # Remove/escape control characters
        sanitized = value.encode('unicode_escape').decode('ascii')
        if len(sanitized) > MAX_LOG_VALUE_LENGTH:
            sanitized = sanitized[:MAX_LOG_VALUE_LENGTH] + "...[truncated]"
        return sanitized
    elif isinstance(value, dict):
        return _filter_sensitive(value)
    elif isinstance(value, list):
        return [sanitize_for_log(v) for v in value[:10]]
    else:
        return value


def _filter_sensitive(data: dict[str, Any]) -> dict[str, Any]:
    """Filter sensitive fields from data before logging."""
    result = {}
    for key, value in data.items():
        key_lower = str(key).lower()
        if any(s in key_lower for s in SENSITIVE_FIELDS):
            result[key] = "***REDACTED***"
        else:
            result[key] = sanitize_for_log(value)
    return result

"""Tests for input validation."""

from __future__ import annotations

import pytest

from solana_sectxt_mcp.errors import ValidationError
from solana_sectxt_mcp.validation import (
    MAX_LOG_VALUE_LENGTH,
    sanitize_for_log,
    validate_length,
    validate_program_id,
)

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
UPGRADEABLE_LOADER_ID = "BPFLoaderUpgradeab1e11111111111111111111111"


class TestValidateProgramId:
    """Tests for program id validation."""

    @pytest.mark.parametrize(
        "program_id",
        [TOKEN_PROGRAM_ID, SYSTEM_PROGRAM_ID, UPGRADEABLE_LOADER_ID],
    )
    def test_valid(self, program_id):
        assert validate_program_id(program_id) == program_id

    def test_whitespace_stripped(self):
        assert validate_program_id(f"  {TOKEN_PROGRAM_ID}\n") == TOKEN_PROGRAM_ID

    @pytest.mark.parametrize("value", [None, 123, b"bytes", ["list"]])
    def test_non_string(self, value):
        with pytest.raises(ValidationError, match="must be a string"):
            validate_program_id(value)

    @pytest.mark.parametrize("value", ["", "   "])
    def test_empty(self, value):
        with pytest.raises(ValidationError, match="cannot be empty"):
            validate_program_id(value)

    def test_too_short(self):
        with pytest.raises(ValidationError, match="got 31"):
            validate_program_id("1" * 31)

    def test_too_long_rejected_before_decoding(self):
        with pytest.raises(ValidationError, match="exceeds maximum length"):
            validate_program_id("1" * 10_000)

    def test_45_characters(self):
        with pytest.raises(ValidationError, match="got 45"):
            validate_program_id("1" * 45)

    @pytest.mark.parametrize("char", ["0", "O", "I", "l", "-", "é"])
    def test_non_base58_characters(self, char):
        value = TOKEN_PROGRAM_ID[:-1] + char
        with pytest.raises(ValidationError, match="non-base58"):
            validate_program_id(value)

    def test_decodes_to_fewer_bytes(self):
        with pytest.raises(ValidationError, match="got 23"):
            validate_program_id("2" * 32)

    def test_decodes_to_more_bytes(self):
        with pytest.raises(ValidationError, match="got 33"):
            validate_program_id("z" * 44)

    def test_null_byte(self):
        with pytest.raises(ValidationError, match="null byte"):
            validate_program_id(TOKEN_PROGRAM_ID[:-1] + "\x00")

    def test_field_name_in_message(self):
        with pytest.raises(ValidationError, match="^address "):
            validate_program_id("", "address")

    def test_error_code(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_program_id("bad")
        assert exc_info.value.code == "invalid_input"


class TestValidateLength:
    """Tests for generic length validation."""

    def test_within_limit(self):
        validate_length("abc", 3, "field")

    def test_over_limit(self):
        with pytest.raises(ValidationError, match="maximum length of 3"):
            validate_length("abcd", 3, "field")

    def test_none_allowed(self):
        validate_length(None, 3, "field")


class TestSanitizeForLog:
    """Tests for log sanitization."""

    def test_control_characters_escaped(self):
        assert sanitize_for_log("a\nb\x00") == "a\\nb\\x00"

    def test_truncated(self):
        result = sanitize_for_log("x" * (MAX_LOG_VALUE_LENGTH + 50))
        assert result.endswith("...[truncated]")
        assert len(result) == MAX_LOG_VALUE_LENGTH + len("...[truncated]")

    def test_sensitive_keys_redacted(self):
        result = sanitize_for_log(
            {"program_id": TOKEN_PROGRAM_ID, "api_key": "abc", "rpc_url": "https://x"}
        )
        assert result == {
            "program_id": TOKEN_PROGRAM_ID,
            "api_key": "***REDACTED***",
            "rpc_url": "***REDACTED***",
        }

    def test_list_capped(self):
        assert sanitize_for_log(list(range(20))) == list(range(10))

    def test_other_types_unchanged(self):
        assert sanitize_for_log(42) == 42

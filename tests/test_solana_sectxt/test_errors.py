"""Tests for the exception hierarchy."""

from __future__ import annotations

import pytest
from solana_sectxt_mcp.errors import (
    AccountNotFoundError,
    ConfigurationError,
    ConnectionError,
    InvalidAccountLayoutError,
    RpcError,
    SecurityTxtMCPError,
    ValidationError,
)


class TestErrorCodes:
    """Each error maps to a stable client-facing code."""

    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (ValidationError("bad"), "invalid_input"),
            (AccountNotFoundError("x"), "account_not_found"),
            (InvalidAccountLayoutError("bad tag"), "invalid_account_layout"),
            (ConnectionError("down"), "connection_error"),
            (RpcError("node behind"), "rpc_error"),
            (ConfigurationError("bad url"), "configuration_error"),
            (SecurityTxtMCPError("other"), "internal_error"),
        ],
    )
    def test_codes(self, error, code):
        assert isinstance(error, SecurityTxtMCPError)
        assert error.code == code


class TestSafeMessages:
    """Tests for client-safe messages."""

    def test_defaults_to_message(self):
        assert ValidationError("program_id cannot be empty").safe_message == (
            "program_id cannot be empty"
        )

    def test_explicit_safe_message(self):
        error = InvalidAccountLayoutError("tag 7 at offset 0", safe_message="Not a program")
        assert str(error) == "tag 7 at offset 0"
        assert error.safe_message == "Not a program"

    def test_connection_error_is_generic(self):
        error = ConnectionError("POST https://rpc.example.com/?api-key=k failed")
        assert "api-key" not in error.safe_message
        assert "api-key" in str(error)

    def test_account_not_found_role(self):
        error = AccountNotFoundError("Abc", role="Program data")
        assert error.safe_message == "Program data account not found: Abc"
        assert error.address == "Abc"

"""Custom exception hierarchy for the security.txt MCP server.

Security: Exception messages are designed to be safe for client exposure
where appropriate. Internal details should only be logged, never returned.
"""

from __future__ import annotations


class SecurityTxtMCPError(Exception):
    """Base exception for the security.txt MCP server.

    All custom exceptions inherit from this class, allowing callers to
    catch all MCP-specific errors with a single except clause.
    """

    #: Machine-readable error code returned to MCP clients.
    code = "internal_error"

    def __init__(self, message: str, *, safe_message: str | None = None) -> None:
        """Initialize exception.

        Args:
            message: Full error message (for logging)
            safe_message: Client-safe message (no internal details)
        """
        super().__init__(message)
        self._safe_message = safe_message or message

    @property
    def safe_message(self) -> str:
        """Return client-safe error message."""
        return self._safe_message


class ConfigurationError(SecurityTxtMCPError):
    """Configuration error.

    Raised when:
    - RPC URL is invalid or uses an unsupported scheme
    - Numeric settings are out of range
    - Commitment level is unknown
    """

    code = "configuration_error"


class ConnectionError(SecurityTxtMCPError):
    """Solana RPC transport failure.

    Raised when:
    - Cannot connect to the RPC endpoint
    - Request timeout or retries exhausted
    - Circuit breaker is open
    """

    code = "connection_error"

    def __init__(self, message: str) -> None:
        # Never expose the endpoint (it may embed an API key)
        super().__init__(
            message,
            safe_message="Unable to reach the Solana RPC endpoint. Check server status."
        )


class RpcError(SecurityTxtMCPError):
    """The RPC node answered with a JSON-RPC error.

    Raised for node-side refusals such as rate limiting or a node that is
    behind. The node's message is logged, never returned.
    """

    code = "rpc_error"

    def __init__(self, message: str) -> None:
        super().__init__(
            message,
            safe_message="The Solana RPC node returned an error. Try again later."
        )


class ValidationError(SecurityTxtMCPError):
    """Input validation failure (invalid input).

    Raised when:
    - Program id is empty or exceeds length limits
    - Program id is not base58 or does not decode to 32 bytes
    - Unknown tool name

    These errors are safe to return to clients as they describe input
    problems, not internal state.
    """

    code = "invalid_input"


class AccountNotFoundError(SecurityTxtMCPError):
    """A program or program-data account does not exist on chain."""

    code = "account_not_found"

    def __init__(self, address: str, role: str = "Program") -> None:
        message = f"{role} account not found: {address}"
        super().__init__(message, safe_message=message)
        self.address = address
        self.role = role


class InvalidAccountLayoutError(SecurityTxtMCPError):
    """Account is owned by the upgradeable loader but is structurally invalid.

    Raised when:
    - The account type tag is not ``Program``
    - The account data is too short to hold the program-data address
    - The program-data account is shorter than its header
    """

    code = "invalid_account_layout"

"""Solana JSON-RPC client for account lookups.

This module wraps solana-py's synchronous ``Client`` behind the small
interface the extractor needs: fetch an account's owner and data.

Security:
- The RPC URL is never logged unredacted (provider API keys)
- Connection timeouts prevent hanging
- Circuit breaker fails fast when the endpoint is down
"""

from __future__ import annotations

import logging
import random
import threading
import time as time_module
from enum import Enum
from time import monotonic
from typing import Any

from .accounts import RawAccount
from .config import Config, is_local_host
from .errors import ConnectionError, RpcError
from .validation import sanitize_for_log, validate_program_id

# =============================================================================
# Constants
# =============================================================================

HEALTH_CHECK_TTL = 30  # Seconds to cache health check result

# Transient errors that should trigger retry:
# - SolanaRpcException: solana-py wrapper around httpx transport errors
# - ConnectError/ReadTimeout/WriteTimeout/PoolTimeout/TimeoutException: httpx
# - ConnectionError/TimeoutError/OSError family: low-level socket errors
# - HTTPStatusError: non-2xx from the endpoint (checked against status codes)
TRANSIENT_ERRORS = frozenset(
    {
        "SolanaRpcException",
        "ConnectError",
        "ConnectTimeout",
        "ReadTimeout",
        "WriteTimeout",
        "PoolTimeout",
        "TimeoutException",
        "RemoteProtocolError",
        "ReadError",
        "ConnectionError",
        "TimeoutError",
        "OSError",
        "ConnectionResetError",
        "BrokenPipeError",
        "ConnectionRefusedError",
        "ConnectionAbortedError",
    }
)

# HTTP status codes that indicate transient failures
TRANSIENT_HTTP_CODES = frozenset({408, 429, 500, 502, 503, 504})

# solana-py raises RPCException for JSON-RPC error responses
RPC_ERRORS = frozenset({"RPCException"})


logger = logging.getLogger(__name__)


# =============================================================================
# Circuit Breaker
# =============================================================================


class CircuitState(Enum):
    """Circuit breaker states for type-safe state management."""

    CLOSED = "closed"  # Normal operation, requests go through
    OPEN = "open"  # Service unhealthy, requests fail immediately
    HALF_OPEN = "half_open"  # Testing if service recovered


class CircuitBreaker:
    """Circuit breaker pattern for failing fast on unhealthy endpoints.

    Prevents every tool call from waiting out the full timeout and
    retry schedule while the RPC endpoint is down.

    Uses monotonic time to be immune to system clock adjustments.
    """

    def __init__(self, failure_threshold: int, recovery_timeout: int) -> None:
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_time: float = 0
        self._lock = threading.Lock()

    @property
    def state(self) -> CircuitState:
        """Get current circuit state."""
        with self._lock:
            if self._state == CircuitState.OPEN:
                if monotonic() - self._last_failure_time >= self.recovery_timeout:
                    self._state = CircuitState.HALF_OPEN
            return self._state

    def allow_request(self) -> bool:
        """Check if request should be allowed."""
        return self.state != CircuitState.OPEN

    def record_success(self) -> None:
        """Record a successful request."""
        with self._lock:
            self._failure_count = 0
            self._state = CircuitState.CLOSED

    def record_failure(self) -> None:
        """Record a failed request."""
        with self._lock:
            self._failure_count += 1
            self._last_failure_time = monotonic()

            if self._failure_count >= self.failure_threshold:
                self._state = CircuitState.OPEN
                logger.warning(
                    "Circuit breaker opened",
                    extra={
                        "failures": self._failure_count,
                        "threshold": self.failure_threshold,
                        "recovery_timeout": self.recovery_timeout,
                    },
                )

    def reset(self) -> None:
        """Reset circuit to closed state."""
        with self._lock:
            self._state = CircuitState.CLOSED
            self._failure_count = 0


# =============================================================================
# RPC Client
# =============================================================================


class SolanaRpcClient:
    """Client for reading Solana accounts over JSON-RPC.

    Thread-safe: Can be used from multiple async contexts via to_thread.

    Features:
    - Lazy connection with timeout and commitment from config
    - Exponential backoff retry for transient transport failures
    - Circuit breaker for failing fast
    - Health check caching
    """

    def __init__(self, config: Config) -> None:
        self.config = config
        self._client: Any = None
        self._client_lock = threading.Lock()
        self._health_cache: tuple[bool, float] | None = None
        self._circuit_breaker = CircuitBreaker(
            failure_threshold=config.circuit_breaker_threshold,
            recovery_timeout=config.circuit_breaker_timeout,
        )

    @property
    def circuit_state(self) -> CircuitState:
        return self._circuit_breaker.state

    def _is_transient_error(self, error: Exception) -> bool:
        """Check if error is transient and should trigger retry."""
        if type(error).__name__ in TRANSIENT_ERRORS:
            return True

        # HTTP status codes in response errors
        response = getattr(error, "response", None)
        if getattr(response, "status_code", None) in TRANSIENT_HTTP_CODES:
            return True

        # Nested exception causes
        if error.__cause__ and type(error.__cause__).__name__ in TRANSIENT_ERRORS:
            return True

        return False

    def _calculate_backoff(self, attempt: int) -> float:
        """Calculate exponential backoff delay with jitter.

        Uses exponential backoff: base_delay * 2^attempt
        Capped at retry_max_delay.
        """
        delay = self.config.retry_base_delay * (2**attempt)
        delay = min(delay, self.config.retry_max_delay)

        # Add 10-20% jitter to prevent synchronized retries
        jitter = delay * random.uniform(0.1, 0.2)
        return delay + jitter

    def _execute_with_retry(self, func: Any, *args: Any, **kwargs: Any) -> Any:
        """Execute function with exponential backoff retry.

        Raises:
            ConnectionError: Circuit open, or transient failures exhausted
        """
        if not self._circuit_breaker.allow_request():
            logger.warning("Circuit breaker open, failing fast")
            raise ConnectionError("Solana RPC unavailable (circuit breaker open)")

        for attempt in range(self.config.max_retries + 1):
            try:
                result = func(*args, **kwargs)
                self._circuit_breaker.record_success()
                return result

            except Exception as e:
                if type(e).__name__ in RPC_ERRORS:
                    # Node-side refusal; says nothing about transport health
                    logger.warning(
                        "RPC node returned an error",
                        extra={"error": sanitize_for_log(str(e))},
                    )
                    raise RpcError(f"RPC node error: {e}") from e

                if not self._is_transient_error(e):
                    raise

                logger.warning(
                    f"Transient RPC failure (attempt {attempt + 1}/{self.config.max_retries + 1})",
                    extra={
                        "error_type": type(e).__name__,
                        "attempt": attempt + 1,
                        "max_retries": self.config.max_retries,
                    },
                )

                if attempt >= self.config.max_retries:
                    self._circuit_breaker.record_failure()
                    logger.error(
                        "Max retries exhausted",
                        extra={"attempts": attempt + 1, "error_type": type(e).__name__},
                    )
                    raise ConnectionError(
                        f"RPC request failed after {attempt + 1} attempts: {type(e).__name__}"
                    ) from e

                delay = self._calculate_backoff(attempt)
                logger.info(f"Retrying in {delay:.2f}s...")
                time_module.sleep(delay)

        raise ConnectionError("Unexpected retry loop exit")

    def connect(self) -> Any:
        """Create the solana-py client (thread-safe).

        Returns the cached client if already created.
        """
        with self._client_lock:
            if self._client is not None:
                return self._client

            from solana.rpc.api import Client
            from solana.rpc.commitment import Commitment

            self._client = Client(
                self.config.rpc_url,
                commitment=Commitment(self.config.commitment),
                timeout=self.config.timeout_seconds,
            )
            logger.debug(
                "Solana RPC client created",
                extra={"rpc_url": self.config.redacted_rpc_url},
            )
            return self._client

    # =========================================================================
    # Account Access
    # =========================================================================

    def get_account(self, address: str) -> RawAccount | None:
        """Fetch an account's owner and data.

        Args:
            address: Base58 account address

        Returns:
            RawAccount, or None if the account does not exist

        Raises:
            ValidationError: Malformed address
            ConnectionError: Transport failure after retries
        """
        from solders.pubkey import Pubkey

        address = validate_program_id(address, "address")
        pubkey = Pubkey.from_string(address)
        client = self.connect()

        start = monotonic()
        response = self._execute_with_retry(client.get_account_info, pubkey)
        elapsed_ms = (monotonic() - start) * 1000

        account = response.value
        if account is None:
            logger.info(
                "Account not found",
                extra={"address": address, "elapsed_ms": round(elapsed_ms, 1)},
            )
            return None

        data = bytes(account.data)
        logger.debug(
            "Fetched account",
            extra={
                "address": address,
                "owner": str(account.owner),
                "data_len": len(data),
                "elapsed_ms": round(elapsed_ms, 1),
            },
        )
        return RawAccount(owner=str(account.owner), data=data)

    # =========================================================================
    # Health and Startup
    # =========================================================================

    def is_available(self) -> bool:
        """Check if the RPC endpoint is healthy (with caching).

        Caches result for HEALTH_CHECK_TTL seconds and respects the
        circuit breaker.
        """
        now = monotonic()

        if not self._circuit_breaker.allow_request():
            return False

        if self._health_cache is not None:
            cached_result, cached_time = self._health_cache
            if now - cached_time < HEALTH_CHECK_TTL:
                return cached_result

        try:
            result = bool(self.connect().is_connected())
        except Exception as e:
            logger.warning(
                "RPC health check failed", extra={"error_type": type(e).__name__}
            )
            result = False

        if result:
            self._circuit_breaker.record_success()
        else:
            self._circuit_breaker.record_failure()

        self._health_cache = (result, monotonic())
        return result

    def clear_health_cache(self) -> None:
        """Clear the health check cache."""
        self._health_cache = None

    def reset_circuit_breaker(self) -> None:
        """Reset circuit breaker to closed state."""
        self._circuit_breaker.reset()
        self.clear_health_cache()

    def get_version(self) -> str | None:
        """Return the node's solana-core version, or None if unavailable."""
        try:
            response = self._execute_with_retry(self.connect().get_version)
        except ConnectionError:
            raise
        except Exception as e:
            logger.warning(
                "Failed to read node version", extra={"error_type": type(e).__name__}
            )
            return None
        value = getattr(response, "value", None)
        return getattr(value, "solana_core", None)

    def validate_startup(self, skip_connectivity: bool = False) -> dict[str, Any]:
        """Validate configuration and connectivity at startup.

        Args:
            skip_connectivity: Skip the network probe (for testing)

        Returns:
            dict with keys ``valid``, ``errors``, ``warnings``,
            ``solana_version``
        """
        from urllib.parse import urlparse

        result: dict[str, Any] = {
            "valid": True,
            "errors": [],
            "warnings": [],
            "solana_version": None,
        }

        parsed = urlparse(self.config.rpc_url)
        if parsed.scheme == "http" and not is_local_host(parsed.hostname or ""):
            result["warnings"].append(
                "Using HTTP for a remote RPC endpoint - consider HTTPS"
            )

        if skip_connectivity:
            return result

        try:
            version = self.get_version()
        except ConnectionError as e:
            result["valid"] = False
            result["errors"].append(e.safe_message)
            return result

        if version is None:
            result["warnings"].append("Could not determine RPC node version")
        else:
            result["solana_version"] = version

        return result

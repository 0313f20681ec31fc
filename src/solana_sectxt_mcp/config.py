"""Configuration management for the security.txt MCP server.

Security design:
- RPC URLs may embed provider API keys, so the query string is never logged
- Config objects cannot be pickled
- URL validation restricts schemes to http/https
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse, urlunparse

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"
VALID_COMMITMENTS = frozenset({"processed", "confirmed", "finalized"})

_RPC_URL_VARS = ("SOLANA_RPC_URL", "RPC_URL")


# =============================================================================
# Environment Variable Parsing Helpers
# =============================================================================


def _parse_int_env(name: str, default: int) -> int:
    """Parse integer environment variable with fallback to default.

    Logs a warning if the value is invalid instead of crashing.
    """
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(
            f"Invalid integer value for {name}: '{value}', using default {default}"
        )
        return default


def _parse_float_env(name: str, default: float) -> float:
    """Parse float environment variable with fallback to default.

    Logs a warning if the value is invalid instead of crashing.
    """
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning(
            f"Invalid float value for {name}: '{value}', using default {default}"
        )
        return default


def _parse_bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name, "").strip().lower()
    if not value:
        return default
    return value in ("true", "1", "yes", "on")


# =============================================================================
# Configuration Class
# =============================================================================


@dataclass(frozen=True)
class Config:
    """Immutable server configuration.

    Security:
    - rpc_url query string is redacted in repr (provider API keys)
    - Cannot be pickled
    - frozen=True prevents accidental mutation

    Production considerations:
    - timeout_seconds: program-data accounts can be several hundred KB,
      increase for slow endpoints
    - max_retries: retry attempts for transient RPC failures
    - circuit_breaker_threshold: failures before circuit opens
    """

    rpc_url: str = DEFAULT_RPC_URL
    timeout_seconds: int = 30
    commitment: str = "confirmed"

    # Network resilience
    max_retries: int = 3  # retry attempts for transient failures
    retry_base_delay: float = 1.0  # base delay in seconds (exponential backoff)
    retry_max_delay: float = 30.0  # max delay between retries
    circuit_breaker_threshold: int = 5  # failures before circuit opens
    circuit_breaker_timeout: int = 60  # seconds before circuit half-opens

    startup_validation: bool = True

    def __post_init__(self) -> None:
        """Validate configuration after initialization.

        Note: Uses object.__setattr__ because dataclass is frozen.
        """
        validated_url = _validate_url(self.rpc_url)
        object.__setattr__(self, "rpc_url", validated_url)
        object.__setattr__(self, "commitment", self.commitment.strip().lower())
        self._validate_values()

    def _validate_values(self) -> None:
        """Validate configuration values (called from __post_init__)."""
        if self.timeout_seconds < 1 or self.timeout_seconds > 300:
            raise ConfigurationError("timeout_seconds must be between 1 and 300")

        if self.max_retries < 0 or self.max_retries > 10:
            raise ConfigurationError("max_retries must be between 0 and 10")

        if self.retry_base_delay < 0 or self.retry_max_delay < self.retry_base_delay:
            raise ConfigurationError(
                "retry delays must be non-negative and retry_max_delay >= retry_base_delay"
            )

        if self.circuit_breaker_threshold < 1:
            raise ConfigurationError("circuit_breaker_threshold must be at least 1")

        if self.commitment not in VALID_COMMITMENTS:
            raise ConfigurationError(
                f"Invalid commitment: {self.commitment}. "
                f"Use one of: {', '.join(sorted(VALID_COMMITMENTS))}"
            )

    @property
    def redacted_rpc_url(self) -> str:
        """RPC URL with query string and credentials removed."""
        return redact_url(self.rpc_url)

    def __repr__(self) -> str:
        """Safe repr that never includes API keys."""
        return (
            f"Config(rpc_url={self.redacted_rpc_url!r}, "
            f"commitment={self.commitment!r}, timeout={self.timeout_seconds}s)"
        )

    def __str__(self) -> str:
        return self.__repr__()

    def __getstate__(self) -> None:
        """Prevent pickling to avoid credential serialization."""
        raise TypeError("Config cannot be pickled (rpc_url may contain secrets)")

    def __reduce__(self) -> None:  # type: ignore[override]
        """Prevent pickling via reduce."""
        raise TypeError("Config cannot be pickled (rpc_url may contain secrets)")

    @classmethod
    def load(cls) -> Config:
        """Load configuration from environment and files.

        RPC URL sources (precedence order):
        1. SOLANA_RPC_URL environment variable
        2. RPC_URL environment variable
        3. .env file in working directory
        4. Public mainnet-beta endpoint

        Returns:
            Config: Validated configuration

        Raises:
            ConfigurationError: If a value is invalid
        """
        url = _load_rpc_url() or DEFAULT_RPC_URL

        return cls(
            rpc_url=url,
            timeout_seconds=_parse_int_env("SOLANA_RPC_TIMEOUT", 30),
            commitment=os.getenv("SOLANA_COMMITMENT", "confirmed"),
            max_retries=_parse_int_env("SOLANA_MAX_RETRIES", 3),
            retry_base_delay=_parse_float_env("SOLANA_RETRY_DELAY", 1.0),
            retry_max_delay=_parse_float_env("SOLANA_RETRY_MAX_DELAY", 30.0),
            circuit_breaker_threshold=_parse_int_env("SOLANA_CIRCUIT_THRESHOLD", 5),
            circuit_breaker_timeout=_parse_int_env("SOLANA_CIRCUIT_TIMEOUT", 60),
            startup_validation=_parse_bool_env("SOLANA_STARTUP_VALIDATION", True),
        )


# =============================================================================
# RPC URL Loading
# =============================================================================


def _load_rpc_url() -> str | None:
    """Load the RPC URL from the environment or a local .env file."""
    for name in _RPC_URL_VARS:
        value = os.getenv(name)
        if value and value.strip():
            logger.debug(f"Loaded RPC URL from {name} environment variable")
            return value.strip()

    env_file = Path.cwd() / ".env"
    value = _load_from_env_file(env_file, _RPC_URL_VARS)
    if value:
        logger.debug("Loaded RPC URL from .env file")
        return value

    return None


def _load_from_env_file(path: Path, names: tuple[str, ...]) -> str | None:
    """Load the first matching ``NAME=value`` entry from a .env file.

    Security: Warns when the file is world-readable since provider URLs
    often carry API keys.
    """
    if not path.exists():
        return None

    if hasattr(os, "stat"):
        mode = path.stat().st_mode
        # Warn if world (other) can read/write (group access OK for dev, 640)
        if mode & (stat.S_IROTH | stat.S_IWOTH):
            logger.warning(
                ".env file has insecure permissions (world-readable)",
                extra={"path": str(path), "mode": oct(mode)},
            )

    try:
        content = path.read_text()
    except OSError as e:
        logger.warning(f"Failed to read .env file: {e}")
        return None

    found: dict[str, str] = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if key.startswith("export "):
            key = key[len("export "):].strip()
        if key not in names or key in found:
            continue

        value = value.strip()
        # Remove quotes if present
        if (value.startswith('"') and value.endswith('"')) or (
            value.startswith("'") and value.endswith("'")
        ):
            value = value[1:-1]
        if value:
            found[key] = value

    for name in names:
        if name in found:
            return found[name]
    return None


# =============================================================================
# URL Validation
# =============================================================================


def redact_url(url: str) -> str:
    """Strip credentials, query string and fragment from a URL for logging."""
    parsed = urlparse(url)
    netloc = parsed.hostname or ""
    if parsed.port:
        netloc = f"{netloc}:{parsed.port}"
    return urlunparse((parsed.scheme, netloc, parsed.path, "", "", ""))


def _validate_url(url: str) -> str:
    """Validate and normalize the RPC URL.

    Security: Restricts URL schemes to http/https.
    """
    url = url.strip().rstrip("/")

    if not url:
        raise ConfigurationError("RPC URL cannot be empty")

    parsed = urlparse(url)

    # Only allow http/https
    if parsed.scheme not in ("http", "https"):
        raise ConfigurationError(
            f"Invalid URL scheme: {parsed.scheme}. Use http or https."
        )

    # Must have a host
    if not parsed.netloc:
        raise ConfigurationError("Invalid URL: missing host")

    if parsed.scheme == "http" and not is_local_host(parsed.hostname or ""):
        logger.warning(
            "Using HTTP for non-local RPC endpoint - requests sent in plaintext",
            extra={"url": redact_url(url)},
        )

    return url


def is_local_host(host: str) -> bool:
    """Return True for loopback and RFC 1918 hosts."""
    if host in ("localhost", "127.0.0.1", "::1"):
        return True
    if host.startswith(("10.", "192.168.")):
        return True
    if host.startswith("172."):
        parts = host.split(".")
        if len(parts) > 1 and parts[1].isdigit():
            return 16 <= int(parts[1]) <= 31
    return False

"""Solana security.txt MCP Server.

This package provides an MCP (Model Context Protocol) server that finds the
security contact information embedded in deployed Solana programs.

Features:
    - Upgradeable and non-upgradeable program layouts
    - Standard, delimited and single-field security.txt formats
    - Heuristic fallback for contact emails, disclosure URLs and PGP keys

Usage:
    python -m solana_sectxt_mcp
"""

__version__ = "0.1.0"

from .accounts import (
    BPF_UPGRADEABLE_LOADER_ID,
    AccountKind,
    RawAccount,
    resolve_program_image,
)
from .client import CircuitState, SolanaRpcClient
from .config import Config
from .errors import (
    AccountNotFoundError,
    ConfigurationError,
    ConnectionError,
    InvalidAccountLayoutError,
    RpcError,
    SecurityTxtMCPError,
    ValidationError,
)
from .extraction import Extraction, extract_security_txt, find_security_txt
from .logging import get_logger, setup_logging
from .security_txt import SecurityTxtLookup, get_security_txt_info
from .server import SecurityTxtMCPServer

__all__ = [
    "__version__",
    "SecurityTxtMCPError",
    "ConfigurationError",
    "ConnectionError",
    "ValidationError",
    "AccountNotFoundError",
    "InvalidAccountLayoutError",
    "RpcError",
    "Config",
    "SolanaRpcClient",
    "CircuitState",
    "BPF_UPGRADEABLE_LOADER_ID",
    "AccountKind",
    "RawAccount",
    "resolve_program_image",
    "Extraction",
    "extract_security_txt",
    "find_security_txt",
    "SecurityTxtLookup",
    "get_security_txt_info",
    "SecurityTxtMCPServer",
    "setup_logging",
    "get_logger",
]

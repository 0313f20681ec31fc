"""Entry point for running the security.txt MCP server.

Usage:
    python -m solana_sectxt_mcp

Environment Variables:
    SOLANA_RPC_URL: JSON-RPC endpoint (default: https://api.mainnet-beta.solana.com)
        RPC_URL and a .env file are also read
    SOLANA_RPC_TIMEOUT: Request timeout in seconds (default: 30)
    SOLANA_COMMITMENT: processed, confirmed (default) or finalized
    SOLANA_MAX_RETRIES: Retries for transient RPC failures (default: 3)
    SOLANA_STARTUP_VALIDATION: Probe the endpoint on startup (default: true)
    SECTXT_LOG_FORMAT: Log format - "json" (default) or "text"
    SECTXT_LOG_LEVEL: Log level (default: INFO)
"""

from __future__ import annotations

import asyncio
import logging
import sys

from .client import SolanaRpcClient
from .config import Config
from .errors import ConfigurationError
from .logging import setup_logging
from .server import SecurityTxtMCPServer


def main() -> None:
    """Main entry point."""
    setup_logging("solana-sectxt-mcp")
    logger = logging.getLogger("solana_sectxt_mcp")

    try:
        config = Config.load()
        logger.info(f"Starting security.txt MCP server: {config}")

        if config.startup_validation:
            logger.info("Running startup validation...")
            validation = SolanaRpcClient(config).validate_startup()

            for warning in validation.get("warnings", []):
                logger.warning(f"Startup warning: {warning}")

            if validation.get("solana_version"):
                logger.info(
                    f"Connected to Solana node {validation['solana_version']}",
                    extra={"solana_version": validation["solana_version"]},
                )

            if not validation.get("valid", True):
                for error in validation.get("errors", []):
                    logger.error(f"Startup error: {error}")
                # Don't fail hard - tool calls will report RPC errors
                logger.warning(
                    "Startup validation had errors - server will start but may have issues"
                )

        server = SecurityTxtMCPServer(config)
        asyncio.run(server.run())

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        print("\nTo configure, set SOLANA_RPC_URL to an http(s) JSON-RPC endpoint", file=sys.stderr)
        sys.exit(1)

    except KeyboardInterrupt:
        logger.info("Shutting down")

    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    main()

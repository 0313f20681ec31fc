"""MCP Server for Solana program security.txt lookups.

This module implements the Model Context Protocol server that exposes
security.txt extraction as MCP tools.

Security:
- Program ids validated before any RPC call
- Errors sanitized before returning to clients
- RPC URL never returned or logged unredacted
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any

from mcp.server import Server
from mcp.types import TextContent, Tool

from .client import SolanaRpcClient
from .config import Config
from .errors import SecurityTxtMCPError, ValidationError
from .logging import clear_request_id, set_request_id
from .security_txt import get_security_txt_info
from .tool_metadata import (
    DEFAULT_METADATA,
    INSTRUCTIONS,
    SECURITY_TXT_SIMILES,
    TOOL_METADATA,
)
from .validation import MAX_PUBKEY_STR_LENGTH, sanitize_for_log, validate_program_id

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_WARNING = "warning"
STATUS_ERROR = "error"


class SecurityTxtMCPServer:
    """MCP server for Solana security.txt lookups (read-only)."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self.client = SolanaRpcClient(config)
        self.server = Server("solana-sectxt-mcp", instructions=INSTRUCTIONS)
        self._register_tools()

        logger.info(
            "Server started in read-only mode",
            extra={"rpc_url": config.redacted_rpc_url},
        )

    def _register_tools(self) -> None:
        """Register MCP tools."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return [
                Tool(
                    name="get_health",
                    description="Check Solana RPC endpoint health and connectivity.",
                    inputSchema={"type": "object", "properties": {}},
                ),
                Tool(
                    name="get_security_txt",
                    description=(
                        "Extract the security.txt information embedded in a Solana "
                        "program, making it easier to contact the program's maintainers "
                        "with security concerns. Related: "
                        + ", ".join(SECURITY_TXT_SIMILES)
                    ),
                    inputSchema={
                        "type": "object",
                        "properties": {
                            "program_id": {
                                "type": "string",
                                "description": "The program ID (base58 public key) of the Solana program to inspect",
                                "maxLength": MAX_PUBKEY_STR_LENGTH,
                            },
                        },
                        "required": ["program_id"],
                    },
                ),
            ]

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict) -> list[TextContent]:
            return await self.handle_call(name, arguments)

    async def handle_call(self, name: str, arguments: dict | None) -> list[TextContent]:
        """Run one tool call and render the JSON response."""
        arguments = arguments or {}
        request_id = set_request_id()
        start = time.monotonic()
        try:
            result = await self._dispatch_tool(name, arguments)

        except ValidationError as e:
            logger.warning(
                "Validation failed",
                extra={
                    "tool": name,
                    "error": str(e),
                    "arguments": sanitize_for_log(arguments),
                },
            )
            result = self._error_result(e.code, e.safe_message)

        except SecurityTxtMCPError as e:
            logger.error(
                "MCP error",
                extra={
                    "tool": name,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            )
            message = e.safe_message
            if name == "get_security_txt":
                message = f"Failed to get security.txt info: {message}"
            result = self._error_result(e.code, message)

        except Exception as e:
            logger.exception(
                "Internal error",
                extra={"tool": name, "error_type": type(e).__name__},
            )
            result = self._error_result(
                "internal_error", "An unexpected error occurred. Check server logs."
            )

        finally:
            clear_request_id()

        elapsed_ms = (time.monotonic() - start) * 1000
        result = self._wrap_response(name, result, request_id, elapsed_ms)
        return [TextContent(type="text", text=json.dumps(result, indent=2, default=str))]

    @staticmethod
    def _error_result(error_code: str, message: str) -> dict[str, Any]:
        return {"status": STATUS_ERROR, "error": error_code, "message": message}

    @staticmethod
    def _wrap_response(
        tool_name: str,
        result: dict[str, Any],
        request_id: str,
        elapsed_ms: float,
    ) -> dict[str, Any]:
        """Attach request id, timing, caveats and interpretation constraint."""
        result["request_id"] = request_id
        result["elapsed_ms"] = round(elapsed_ms, 1)
        if result.get("status") != STATUS_ERROR:
            meta = TOOL_METADATA.get(tool_name, DEFAULT_METADATA)
            result["caveats"] = meta["caveats"]
            result["interpretation_constraint"] = meta["interpretation_constraint"]
        return result

    async def _get_security_txt(self, arguments: dict) -> dict[str, Any]:
        program_id = validate_program_id(arguments.get("program_id"), "program_id")

        lookup = await asyncio.to_thread(
            get_security_txt_info, program_id, self.client.get_account
        )
        extraction = lookup.extraction

        if not extraction.found:
            return {
                "status": STATUS_WARNING,
                "program_id": program_id,
                "program_type": lookup.program_type,
                "info": None,
                "method": None,
                "confidence": None,
                "message": "No security.txt information found for this program",
            }

        return {
            "status": STATUS_SUCCESS,
            "program_id": program_id,
            "program_type": lookup.program_type,
            "info": extraction.info,
            "method": extraction.method,
            "confidence": extraction.confidence,
            "message": "Successfully retrieved security.txt information",
        }

    async def _dispatch_tool(self, name: str, arguments: dict) -> dict[str, Any]:
        """Dispatch tool call to appropriate handler."""

        if name == "get_health":
            available = await asyncio.to_thread(self.client.is_available)
            return {
                "status": "healthy" if available else "unavailable",
                "rpc_available": available,
                "circuit_state": self.client.circuit_state.value,
            }

        elif name == "get_security_txt":
            return await self._get_security_txt(arguments)

        else:
            raise ValidationError(f"Unknown tool: {name}")

    async def run(self) -> None:
        """Run the MCP server."""
        from mcp.server.stdio import stdio_server

        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream, write_stream, self.server.create_initialization_options()
            )

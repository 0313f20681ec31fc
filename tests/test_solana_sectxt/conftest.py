"""Pytest fixtures for security.txt MCP tests."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import base58
import pytest
from solana_sectxt_mcp.accounts import BPF_UPGRADEABLE_LOADER_ID, RawAccount
from solana_sectxt_mcp.client import SolanaRpcClient
from solana_sectxt_mcp.config import Config
from solana_sectxt_mcp.server import SecurityTxtMCPServer

# =============================================================================
# Test Data
# =============================================================================

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
UPGRADEABLE_PROGRAM_ID = "11111111111111111111111111111111"

PROGRAM_DATA_KEY = bytes(range(1, 33))
PROGRAM_DATA_ADDRESS = base58.b58encode(PROGRAM_DATA_KEY).decode("ascii")

STANDARD_SECURITY_TXT = (
    b"\x7fELF\x02\x01\x01\x00\xff\xfe\x00"
    b"\n# security.txt\n"
    b"contact: mailto:sec@example.com\n"
    b"expires: 2025-01-01\n"
    b"preferred-languages: en\n"
    b"\n"
    b"\x00\x89\x90\xc3"
)


def program_account_data(program_data_key: bytes = PROGRAM_DATA_KEY, tag: int = 2) -> bytes:
    """Upgradeable loader Program account: u32 tag + program-data address."""
    return tag.to_bytes(4, "little") + program_data_key


def program_data_account_data(image: bytes, slot: int = 123_456) -> bytes:
    """Upgradeable loader ProgramData account: tag byte + 7 slot bytes + image."""
    return b"\x03" + slot.to_bytes(7, "little") + image


class FakeChain:
    """Dict-backed account fetcher that records every lookup."""

    def __init__(self, accounts: dict[str, RawAccount]) -> None:
        self.accounts = accounts
        self.calls: list[str] = []

    def __call__(self, address: str) -> RawAccount | None:
        self.calls.append(address)
        return self.accounts.get(address)


def rpc_account(owner: str, data: bytes) -> SimpleNamespace:
    """Shape of solana-py's Account object as used by the client."""
    return SimpleNamespace(owner=owner, data=data)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mock_config() -> Config:
    """Create a test configuration with fast retries."""
    return Config(
        rpc_url="https://rpc.example.com/?api-key=secret-key-123",
        timeout_seconds=5,
        max_retries=2,
        retry_base_delay=0.0,
        retry_max_delay=0.0,
        circuit_breaker_threshold=3,
        circuit_breaker_timeout=60,
        startup_validation=False,
    )


@pytest.fixture
def make_chain():
    """Factory for dict-backed fetchers: ``make_chain({address: RawAccount})``."""
    return FakeChain


@pytest.fixture
def upgradeable_chain() -> FakeChain:
    """Upgradeable program whose image carries a standard security.txt."""
    return FakeChain(
        {
            UPGRADEABLE_PROGRAM_ID: RawAccount(
                owner=BPF_UPGRADEABLE_LOADER_ID, data=program_account_data()
            ),
            PROGRAM_DATA_ADDRESS: RawAccount(
                owner=BPF_UPGRADEABLE_LOADER_ID,
                data=program_data_account_data(STANDARD_SECURITY_TXT),
            ),
        }
    )


@pytest.fixture
def mock_solana_client(upgradeable_chain: FakeChain) -> MagicMock:
    """Mock solana-py Client serving accounts from the fake chain."""
    client = MagicMock()

    def get_account_info(pubkey):
        account = upgradeable_chain.accounts.get(str(pubkey))
        if account is None:
            return SimpleNamespace(value=None)
        return SimpleNamespace(value=rpc_account(account.owner, account.data))

    client.get_account_info.side_effect = get_account_info
    client.is_connected.return_value = True
    client.get_version.return_value = SimpleNamespace(
        value=SimpleNamespace(solana_core="1.18.26")
    )
    return client


@pytest.fixture
def rpc_client(mock_config: Config, mock_solana_client: MagicMock) -> SolanaRpcClient:
    """Create an RPC client with mocked solana-py."""
    client = SolanaRpcClient(mock_config)
    client._client = mock_solana_client
    return client


@pytest.fixture
def mock_server(mock_config: Config, rpc_client: SolanaRpcClient) -> SecurityTxtMCPServer:
    """Create an MCP server with mocked client."""
    server = SecurityTxtMCPServer(mock_config)
    server.client = rpc_client
    return server

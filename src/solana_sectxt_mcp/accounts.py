"""Program account layout resolution.

A deployed program is either stored directly in its account (legacy
loaders) or, under the upgradeable BPF loader, split across two accounts:

    Program account (owned by the upgradeable loader)
        [0:4]   u32 LE account type tag, 2 = Program
        [4:36]  address of the ProgramData account

    ProgramData account
        [0:1]   account type tag
        [1:8]   deployment slot
        [8:]    program image

All byte offsets live in this module.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import base58

from .errors import AccountNotFoundError, InvalidAccountLayoutError

logger = logging.getLogger(__name__)

BPF_UPGRADEABLE_LOADER_ID = "BPFLoaderUpgradeab1e11111111111111111111111"

PROGRAM_ACCOUNT_TAG = 2
TAG_SIZE = 4
PUBKEY_SIZE = 32
PROGRAM_DATA_ADDRESS_OFFSET = TAG_SIZE
PROGRAM_DATA_HEADER_SIZE = 8  # 1 type-tag byte + 7 slot bytes


class AccountKind(Enum):
    """Shape of an account holding (or pointing at) a program image."""

    DIRECT = "direct"
    UPGRADEABLE_PROGRAM = "upgradeable_program"
    UPGRADEABLE_PROGRAM_DATA = "upgradeable_program_data"


@dataclass(frozen=True)
class RawAccount:
    """Owner and data of an on-chain account as returned by the RPC."""

    owner: str
    data: bytes

    def __repr__(self) -> str:
        return f"RawAccount(owner={self.owner!r}, data=<{len(self.data)} bytes>)"


AccountFetcher = Callable[[str], RawAccount | None]


def classify_account(account: RawAccount) -> AccountKind:
    """Tell a direct program account from an upgradeable Program account."""
    if account.owner == BPF_UPGRADEABLE_LOADER_ID:
        return AccountKind.UPGRADEABLE_PROGRAM
    return AccountKind.DIRECT


def read_program_data_address(data: bytes) -> str:
    """Return the base58 ProgramData address stored in a Program account.

    Raises:
        InvalidAccountLayoutError: If the tag is not Program or the data is
            too short to contain the address
    """
    if len(data) < TAG_SIZE:
        raise InvalidAccountLayoutError(
            f"Program account data truncated: {len(data)} bytes, no type tag",
            safe_message="Not a valid upgradeable program account",
        )

    tag = int.from_bytes(data[:TAG_SIZE], "little")
    if tag != PROGRAM_ACCOUNT_TAG:
        raise InvalidAccountLayoutError(
            f"Unexpected upgradeable loader account type tag {tag}",
            safe_message="Not a valid upgradeable program account",
        )

    end = PROGRAM_DATA_ADDRESS_OFFSET + PUBKEY_SIZE
    if len(data) < end:
        raise InvalidAccountLayoutError(
            f"Program account data truncated: {len(data)} bytes, need {end}",
            safe_message="Not a valid upgradeable program account",
        )

    return base58.b58encode(data[PROGRAM_DATA_ADDRESS_OFFSET:end]).decode("ascii")


def strip_program_data_header(data: bytes) -> bytes:
    """Drop the ProgramData header and return the program image."""
    if len(data) < PROGRAM_DATA_HEADER_SIZE:
        raise InvalidAccountLayoutError(
            f"Program data account truncated: {len(data)} bytes, "
            f"header is {PROGRAM_DATA_HEADER_SIZE}",
            safe_message="Program data account is truncated",
        )
    return bytes(data[PROGRAM_DATA_HEADER_SIZE:])


def resolve_program_image(
    account: RawAccount, fetch: AccountFetcher
) -> tuple[AccountKind, bytes]:
    """Select the bytes that hold the program image.

    Issues at most one extra fetch (the ProgramData account).

    Args:
        account: The account at the requested program id
        fetch: Callable returning a RawAccount for an address, or None

    Returns:
        (kind, image) where kind is DIRECT or UPGRADEABLE_PROGRAM_DATA

    Raises:
        InvalidAccountLayoutError: Malformed upgradeable Program account
        AccountNotFoundError: ProgramData account does not exist
    """
    kind = classify_account(account)
    if kind is AccountKind.DIRECT:
        return kind, bytes(account.data)

    program_data_address = read_program_data_address(account.data)
    logger.debug(
        "Following upgradeable program to its data account",
        extra={"program_data_address": program_data_address},
    )

    program_data = fetch(program_data_address)
    if program_data is None:
        raise AccountNotFoundError(program_data_address, role="Program data")

    return (
        AccountKind.UPGRADEABLE_PROGRAM_DATA,
        strip_program_data_header(program_data.data),
    )

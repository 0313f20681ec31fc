"""security.txt lookup for a deployed Solana program.

Ties account resolution to extraction:

    fetch(program_id) -> resolve_program_image -> find_security_txt

Nothing is cached; every call reads the chain again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .accounts import AccountFetcher, AccountKind, resolve_program_image
from .errors import AccountNotFoundError
from .extraction import Extraction, find_security_txt

logger = logging.getLogger(__name__)

_KIND_LABELS = {
    AccountKind.DIRECT: "non-upgradeable",
    AccountKind.UPGRADEABLE_PROGRAM: "upgradeable",
    AccountKind.UPGRADEABLE_PROGRAM_DATA: "upgradeable",
}


@dataclass(frozen=True)
class SecurityTxtLookup:
    """Outcome of one lookup: where the image came from and what it held."""

    program_id: str
    account_kind: AccountKind
    image_size: int
    extraction: Extraction

    @property
    def info(self) -> dict[str, str]:
        return self.extraction.info

    @property
    def program_type(self) -> str:
        return _KIND_LABELS[self.account_kind]


def get_security_txt_info(program_id: str, fetch: AccountFetcher) -> SecurityTxtLookup:
    """Read a program's account(s) and extract its security.txt fields.

    Args:
        program_id: Base58 program address (already validated)
        fetch: Account fetcher, e.g. ``SolanaRpcClient.get_account``

    Returns:
        SecurityTxtLookup; ``info`` is empty when the program declares nothing

    Raises:
        AccountNotFoundError: Program or program-data account is missing
        InvalidAccountLayoutError: Malformed upgradeable program account
    """
    account = fetch(program_id)
    if account is None:
        raise AccountNotFoundError(program_id)

    kind, image = resolve_program_image(account, fetch)
    extraction = find_security_txt(image)

    logger.info(
        "security.txt lookup complete",
        extra={
            "program_id": program_id,
            "account_kind": kind.value,
            "image_len": len(image),
            "method": extraction.method,
            "fields": sorted(extraction.info),
        },
    )
    return SecurityTxtLookup(
        program_id=program_id,
        account_kind=kind,
        image_size=len(image),
        extraction=extraction,
    )

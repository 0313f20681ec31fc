"""Free-text fallback scan for contact-shaped strings.

Used only when no security.txt block or contact field was found. The
patterns are tried by category; a later category never wins over an
earlier one, even when its match appears earlier in the text.
"""

from __future__ import annotations

import re

PGP_KEY_SENTINEL = "PGP key found in program data"

_DOMAIN = r"[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"

CONTACT_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("security_email", re.compile(rf"security@{_DOMAIN}")),
    ("mailto", re.compile(rf"mailto:[a-zA-Z0-9._%+-]+@{_DOMAIN}")),
    (
        "disclosure_url",
        re.compile(rf"https?://{_DOMAIN}/(?:security|responsible-disclosure|vulnerability)"),
    ),
)

PGP_BLOCK_RE = re.compile(
    r"-----BEGIN PGP PUBLIC KEY BLOCK-----.*?-----END PGP PUBLIC KEY BLOCK-----",
    re.DOTALL,
)


def find_contact(text: str) -> str | None:
    """Return the first match of the highest-priority category that matches."""
    for _category, pattern in CONTACT_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(0)
    return None


def has_pgp_key(text: str) -> bool:
    return PGP_BLOCK_RE.search(text) is not None


def extract_security_info_from_text(text: str) -> dict[str, str]:
    """Scan decoded program text for contact hints and a PGP key block.

    Returns an empty dict when nothing is found.
    """
    result: dict[str, str] = {}

    contact = find_contact(text)
    if contact is not None:
        result["contact"] = contact

    if has_pgp_key(text):
        # Only the presence is reported, never the key material
        result["encryption"] = PGP_KEY_SENTINEL

    return result

"""Ordered matcher cascade over decoded program text.

Matchers run from most to least structured. The first matcher that
captures something decides the result; results are never merged. When
none matches, the heuristic scan in :mod:`.heuristics` runs instead.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field

from .decoder import decode_program_image
from .heuristics import extract_security_info_from_text
from .normalizer import parse_security_txt

logger = logging.getLogger(__name__)

METHOD_STANDARD = "standard"
METHOD_DELIMITED = "delimited"
METHOD_FIELD = "field"
METHOD_HEURISTIC = "heuristic"

# Header line, then everything up to a blank line, the next comment line
# or the end of the text.
STANDARD_BLOCK_RE = re.compile(
    r"(?:^|\n)# ?security\.txt(?:\n|\Z)(.*?)(?:\n\n|\n#|\Z)",
    re.IGNORECASE | re.DOTALL,
)

DELIMITED_BLOCK_RE = re.compile(
    r"-----BEGIN SECURITY\.TXT-----(.*?)-----END SECURITY\.TXT-----",
    re.IGNORECASE | re.DOTALL,
)

# Values stop at NUL: strings in program images are NUL-terminated
CONTACT_FIELD_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^Contact:[ \t]*(\S[^\n\x00]*)", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^Security-Contact:[ \t]*(\S[^\n\x00]*)", re.IGNORECASE | re.MULTILINE),
    re.compile(r"mailto:([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})", re.IGNORECASE),
)

Matcher = Callable[[str], dict[str, str] | None]


@dataclass(frozen=True)
class Extraction:
    """Result of one extraction: the fields and the stage that found them."""

    info: dict[str, str] = field(default_factory=dict)
    method: str | None = None

    @property
    def found(self) -> bool:
        return bool(self.info)

    @property
    def confidence(self) -> str | None:
        """``high`` for structured matches, ``low`` for the heuristic scan."""
        if not self.info:
            return None
        return "low" if self.method == METHOD_HEURISTIC else "high"


def match_standard_block(text: str) -> dict[str, str] | None:
    """``# security.txt`` header followed by ``field: value`` lines."""
    match = STANDARD_BLOCK_RE.search(text)
    if match and match.group(1):
        return parse_security_txt(match.group(1))
    return None


def match_delimited_block(text: str) -> dict[str, str] | None:
    """Block between BEGIN/END SECURITY.TXT markers."""
    match = DELIMITED_BLOCK_RE.search(text)
    if match and match.group(1):
        return parse_security_txt(match.group(1))
    return None


def match_contact_field(text: str) -> dict[str, str] | None:
    """A lone Contact, Security-Contact or mailto: address."""
    for pattern in CONTACT_FIELD_PATTERNS:
        match = pattern.search(text)
        if match:
            return {"contact": match.group(1).strip()}
    return None


MATCHERS: tuple[tuple[str, Matcher], ...] = (
    (METHOD_STANDARD, match_standard_block),
    (METHOD_DELIMITED, match_delimited_block),
    (METHOD_FIELD, match_contact_field),
)


def run_cascade(text: str) -> Extraction:
    """Run the matchers in order and return the first hit."""
    for method, matcher in MATCHERS:
        info = matcher(text)
        if info is not None:
            logger.debug(
                "security.txt matched",
                extra={"method": method, "fields": sorted(info)},
            )
            return Extraction(info=info, method=method)

    info = extract_security_info_from_text(text)
    if info:
        logger.debug("Heuristic security contact found", extra={"fields": sorted(info)})
        return Extraction(info=info, method=METHOD_HEURISTIC)
    return Extraction()


def find_security_txt(data: bytes) -> Extraction:
    """Decode a program image and run the cascade over it."""
    return run_cascade(decode_program_image(data))


def extract_security_txt(data: bytes) -> dict[str, str]:
    """Return the security.txt fields embedded in a program image.

    An empty dict means nothing was found.
    """
    return find_security_txt(data).info

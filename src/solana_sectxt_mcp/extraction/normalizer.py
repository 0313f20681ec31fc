"""Field normalization for security.txt blocks."""

from __future__ import annotations

import re

_KEBAB_RE = re.compile(r"-([a-z])")
_FIELD_LINE_RE = re.compile(r"^([^:]+):\s*(.*)$", re.DOTALL)


def kebab_to_camel(name: str) -> str:
    """Fold ``-x`` sequences into ``X``.

    Only lower-case ASCII letters are folded, so callers lower-case first.
    A hyphen followed by anything else is left in place.

    >>> kebab_to_camel("preferred-languages")
    'preferredLanguages'
    """
    return _KEBAB_RE.sub(lambda m: m.group(1).upper(), name)


def normalize_field_name(field: str) -> str:
    """Trim, lower-case and camel-fold a security.txt field name."""
    return kebab_to_camel(field.strip().lower())


def parse_security_txt(block: str) -> dict[str, str]:
    """Parse ``field: value`` lines into a normalized mapping.

    Blank lines, ``#`` comment lines and lines without a colon are
    skipped. A repeated field keeps its last value. Never raises.
    """
    result: dict[str, str] = {}

    for line in block.split("\n"):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        match = _FIELD_LINE_RE.match(line)
        if not match:
            continue

        key = normalize_field_name(match.group(1))
        if not key:
            continue
        result[key] = match.group(2).strip()

    return result

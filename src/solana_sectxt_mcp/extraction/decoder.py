"""Lossy byte-to-text decoding for program images."""

from __future__ import annotations


def decode_program_image(data: bytes) -> str:
    """Decode a program image as UTF-8, replacing invalid sequences.

    Program images are mostly machine code, so strict decoding would fail
    on nearly every input. Each invalid sequence becomes U+FFFD and the
    embedded text keeps its relative order for pattern search.
    """
    return bytes(data).decode("utf-8", errors="replace")

"""Tests for the heuristic contact scan."""

from __future__ import annotations

import pytest

from solana_sectxt_mcp.extraction.heuristics import (
    PGP_KEY_SENTINEL,
    extract_security_info_from_text,
    find_contact,
    has_pgp_key,
)

PGP_BLOCK = (
    "-----BEGIN PGP PUBLIC KEY BLOCK-----\n"
    "mQINBGExampleKeyMaterial\n"
    "-----END PGP PUBLIC KEY BLOCK-----"
)


class TestFindContact:
    """Tests for category-ordered contact matching."""

    def test_security_email(self):
        assert find_contact("write to security@example.org today") == "security@example.org"

    def test_mailto_keeps_prefix(self):
        assert find_contact("\x00mailto:bugs@example.io\x00") == "mailto:bugs@example.io"

    @pytest.mark.parametrize(
        "path",
        ["security", "responsible-disclosure", "vulnerability"],
    )
    def test_disclosure_urls(self, path):
        text = f"\x00\x00https://example.com/{path}\x00"
        assert find_contact(text) == f"https://example.com/{path}"

    def test_http_scheme_accepted(self):
        assert find_contact("http://example.com/security") == "http://example.com/security"

    def test_category_beats_position(self):
        """An earlier URL loses to a later security@ address."""
        text = "https://example.com/security ... security@example.org"
        assert find_contact(text) == "security@example.org"

    def test_mailto_beats_earlier_url(self):
        text = "https://example.com/vulnerability mailto:team@example.org"
        assert find_contact(text) == "mailto:team@example.org"

    def test_first_in_text_within_category(self):
        text = "https://a.io/vulnerability then https://b.io/security"
        assert find_contact(text) == "https://a.io/vulnerability"

    def test_unrelated_url_ignored(self):
        assert find_contact("https://example.com/docs") is None

    def test_plain_email_ignored(self):
        assert find_contact("admin@example.org") is None

    def test_empty(self):
        assert find_contact("") is None


class TestPgpDetection:
    """Tests for PGP public key block detection."""

    def test_full_block(self):
        assert has_pgp_key("\x00" + PGP_BLOCK + "\x00") is True

    def test_begin_marker_only(self):
        assert has_pgp_key("-----BEGIN PGP PUBLIC KEY BLOCK-----\nabc") is False

    def test_sentinel_reported_not_key(self):
        result = extract_security_info_from_text(PGP_BLOCK)
        assert result == {"encryption": PGP_KEY_SENTINEL}
        assert "mQINB" not in result["encryption"]


class TestExtractSecurityInfoFromText:
    """Tests for the combined heuristic result."""

    def test_contact_and_key(self):
        text = "security@example.org\x00" + PGP_BLOCK
        assert extract_security_info_from_text(text) == {
            "contact": "security@example.org",
            "encryption": PGP_KEY_SENTINEL,
        }

    def test_contact_only(self):
        assert extract_security_info_from_text("mailto:a@example.org") == {
            "contact": "mailto:a@example.org"
        }

    def test_nothing(self):
        assert extract_security_info_from_text("\x7fELF\x00\x00") == {}

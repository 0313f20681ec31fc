"""security.txt extraction from program images."""

from .cascade import (
    MATCHERS,
    METHOD_DELIMITED,
    METHOD_FIELD,
    METHOD_HEURISTIC,
    METHOD_STANDARD,
    Extraction,
    extract_security_txt,
    find_security_txt,
    match_contact_field,
    match_delimited_block,
    match_standard_block,
    run_cascade,
)
from .decoder import decode_program_image
from .heuristics import (
    PGP_KEY_SENTINEL,
    extract_security_info_from_text,
    find_contact,
    has_pgp_key,
)
from .normalizer import kebab_to_camel, normalize_field_name, parse_security_txt

__all__ = [
    # decoder
    "decode_program_image",
    # normalizer
    "kebab_to_camel",
    "normalize_field_name",
    "parse_security_txt",
    # heuristics
    "PGP_KEY_SENTINEL",
    "extract_security_info_from_text",
    "find_contact",
    "has_pgp_key",
    # cascade
    "MATCHERS",
    "METHOD_STANDARD",
    "METHOD_DELIMITED",
    "METHOD_FIELD",
    "METHOD_HEURISTIC",
    "Extraction",
    "match_standard_block",
    "match_delimited_block",
    "match_contact_field",
    "run_cascade",
    "find_security_txt",
    "extract_security_txt",
]

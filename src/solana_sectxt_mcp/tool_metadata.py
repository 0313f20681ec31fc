"""Per-tool caveats, interpretation constraints and server instructions."""

INSTRUCTIONS = (
    "Security contact lookup for deployed Solana programs. Reads the "
    "program's on-chain binary and extracts its embedded security.txt "
    "(contact, expires, encryption, policy, ...). Use it to find who to "
    "contact about a vulnerability. Extracted data is self-declared by the "
    "program author and is not verified."
)

# Phrases agents use when they need this tool
SECURITY_TXT_SIMILES = (
    "security.txt",
    "security contact",
    "program security",
    "security disclosure",
    "vulnerability reporting",
    "security information",
    "contact maintainers",
    "security policy",
)

TOOL_METADATA: dict[str, dict[str, list[str] | str]] = {
    "get_security_txt": {
        "caveats": [
            "security.txt content is self-declared by the program deployer and unverified",
            "Heuristic matches (method=heuristic) may pick up unrelated strings from the binary",
            "Absence of security.txt does not mean the program has no security contact",
        ],
        "interpretation_constraint": "Contact details identify a reporting channel, not program authenticity",
    },
    "get_health": {
        "caveats": [
            "Health reflects the configured RPC endpoint only",
        ],
        "interpretation_constraint": "A healthy endpoint does not guarantee every account is readable",
    },
}

DEFAULT_METADATA: dict[str, list[str] | str] = {
    "caveats": ["No specific caveats"],
    "interpretation_constraint": "Interpret results in context of the specific program",
}

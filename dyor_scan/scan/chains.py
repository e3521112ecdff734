"""Contract-address classification: which chain a raw address belongs to."""

import re

SOLANA = "solana"
BNB = "bnb"

SUPPORTED_CHAINS = (SOLANA, BNB)

# Supply decimals to assume when the fundamentals source did not report any
DEFAULT_DECIMALS: dict[str, int] = {
    BNB: 18,
    SOLANA: 9,
}

_EVM_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
_BASE58_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


class InvalidAddressError(ValueError):
    """Raised when an address is empty or matches no supported chain."""


def classify_address(value: object) -> str | None:
    """Return ``"bnb"``, ``"solana"`` or ``None`` for an unrecognized address."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    if _EVM_RE.match(trimmed):
        return BNB
    if _BASE58_RE.match(trimmed):
        return SOLANA
    return None


def require_chain(value: object) -> tuple[str, str]:
    """Normalize and classify an address, raising on anything unrecognized."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidAddressError("Contract address is required")
    chain = classify_address(value)
    if chain is None:
        raise InvalidAddressError(
            "Invalid address format. Must be a valid Solana or BNB/BSC address."
        )
    return value.strip(), chain

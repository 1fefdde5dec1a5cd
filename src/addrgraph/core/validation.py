from __future__ import annotations

from addrgraph.config.settings import ADDRESS_MAX_LEN, ADDRESS_MIN_LEN, ADDRESS_PREFIXES
from addrgraph.core.errors import ValidationError


def validate_address(address: str) -> str:
    """
    Plausibility check only (length + prefix), no checksum decoding.
    Returns the stripped address or raises ValidationError.
    """
    addr = (address or "").strip()
    if not addr:
        raise ValidationError("Please enter a Bitcoin address")

    if len(addr) < ADDRESS_MIN_LEN or len(addr) > ADDRESS_MAX_LEN:
        raise ValidationError(
            f"Address must be {ADDRESS_MIN_LEN}-{ADDRESS_MAX_LEN} characters long, got {len(addr)}"
        )

    if not addr.startswith(ADDRESS_PREFIXES):
        raise ValidationError(
            "Address must start with one of: " + ", ".join(ADDRESS_PREFIXES)
        )

    return addr

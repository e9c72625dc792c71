"""Participant address normalization"""

from typing import Optional


def canonical_address(address: Optional[str]) -> str:
    """
    Canonical form used for every address comparison.

    Addresses are opaque identifiers compared case-insensitively, so
    "0xAbC" and "0xabc" name the same participant.
    """
    return (address or "").strip().lower()


"""Deterministic IDs for ShotNotes groupings."""

import hashlib
from collections.abc import Iterable

SHORT_HASH_LENGTH = 12


def generate_group_id(prefix: str, member_ids: Iterable[str]) -> str:
    """Generate a stable ID for an ordered group of record IDs.

    Returns:
        ID in format: prefix_shortHash
    """
    digest = hashlib.sha256("|".join(member_ids).encode("utf-8")).hexdigest()
    return f"{prefix}_{digest[:SHORT_HASH_LENGTH]}"

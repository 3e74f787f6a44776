"""Time-ordered identifiers."""

from __future__ import annotations

import uuid

import uuid6


def uuid7() -> uuid.UUID:
    """UUIDv7; ids generated in the same process sort in creation order."""
    return uuid6.uuid7()


def new_request_id() -> str:
    return str(uuid7())

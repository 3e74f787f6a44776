"""Shared helpers."""

from .ids import new_request_id, uuid7

__all__ = ["new_request_id", "uuid7"]

"""Data access helpers for the target store."""

from .identity_repository import IdentityResolver

__all__ = ["IdentityResolver"]

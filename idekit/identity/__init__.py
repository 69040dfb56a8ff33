"""Identifier generation."""

from idekit.identity.ids import IDENTITY_KEYS, IdentitySet, generate_identity

__all__ = ["IDENTITY_KEYS", "IdentitySet", "generate_identity"]

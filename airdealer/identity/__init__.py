"""Identity/session provider contract and the bundled local provider"""
from airdealer.identity.base import Identity, IdentityProvider
from airdealer.identity.local import LocalIdentityProvider

__all__ = ["Identity", "IdentityProvider", "LocalIdentityProvider"]

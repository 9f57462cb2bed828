"""Identity/session provider contract.

A provider instance is bound to one caller's session. Failures are surfaced as
``InvalidCredentials``, ``AlreadyExists``, ``NotFound`` or ``Unavailable``.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, NamedTuple, Optional


class Identity(NamedTuple):
    """An authenticated principal"""
    id: str
    email: str


class IdentityProvider(ABC):

    @abstractmethod
    def get_current_identity(self) -> Optional[Identity]:
        """Return the identity of the bound session, or None when signed out."""

    @abstractmethod
    def sign_out(self) -> None:
        """End the bound session. Signing out without a session is a no-op."""

    @abstractmethod
    def sign_in(self, email: str, secret: str) -> Identity:
        """Authenticate and bind a new session to this provider."""

    @abstractmethod
    def create_identity(self, email: str, secret: str, profile: Optional[Dict[str, Any]] = None) -> Identity:
        """Create a new principal. Does not sign it in."""

    @abstractmethod
    def delete_identity(self, identity_id: str) -> None:
        """Remove a principal; ``NotFound`` if it does not exist."""

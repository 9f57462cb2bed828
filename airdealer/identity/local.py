"""Identity provider storing principals in the ``auth_identities`` table.

Sessions are RS256 JWTs; signing out puts the token's jti on the
``revoked_tokens`` blocklist.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from airdealer.exceptions import AlreadyExists, ConstraintViolation, InvalidCredentials, NotFound
from airdealer.identity.base import Identity, IdentityProvider
from airdealer.store.base import RecordStore
from airdealer.utils.auth import hash_secret, verify_secret
from airdealer.utils.jwt_utils import create_session_token, decode_session_token
from airdealer.utils.logger import logger

IDENTITIES_TABLE = "auth_identities"
REVOKED_TOKENS_TABLE = "revoked_tokens"


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class LocalIdentityProvider(IdentityProvider):
    """Session-bound identity provider.

    ``access_token`` is the caller's bearer token (if any). ``sign_in`` replaces
    it with a freshly issued one and ``sign_out`` revokes and clears it.
    """

    def __init__(self, store: RecordStore, access_token: Optional[str] = None):
        self.store = store
        self.access_token = access_token

    def get_current_identity(self) -> Optional[Identity]:
        if not self.access_token:
            return None

        payload = decode_session_token(self.access_token)
        if payload is None:
            return None

        if self.store.count(REVOKED_TOKENS_TABLE, {"jti": payload["jti"]}):
            return None

        try:
            row = self.store.find_one(IDENTITIES_TABLE, {"id": payload["sub"]})
        except NotFound:
            # identity deleted while the session was still live
            return None
        return Identity(id=row["id"], email=row["email"])

    def sign_out(self) -> None:
        if not self.access_token:
            return

        payload = decode_session_token(self.access_token)
        self.access_token = None
        if payload is None:
            return

        if not self.store.count(REVOKED_TOKENS_TABLE, {"jti": payload["jti"]}):
            expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc).replace(tzinfo=None)
            self.store.insert(REVOKED_TOKENS_TABLE, {"jti": payload["jti"], "expires_at": expires_at})

        self.prune_revoked_tokens()
        logger.info("Session signed out", extra={"identity_id": payload["sub"], "action": "sign_out"})

    def prune_revoked_tokens(self) -> int:
        """Delete blocklist rows whose tokens have already expired; returns the number removed."""
        now = datetime.utcnow()
        expired = [
            row["id"] for row in self.store.find(REVOKED_TOKENS_TABLE)
            if row["expires_at"] is not None and row["expires_at"] <= now
        ]
        if not expired:
            return 0
        removed = self.store.delete(REVOKED_TOKENS_TABLE, {"id": expired})
        logger.info(f"Pruned {removed} expired revoked tokens", extra={"action": "prune_revoked_tokens"})
        return removed

    def sign_in(self, email: str, secret: str) -> Identity:
        try:
            row = self.store.find_one(IDENTITIES_TABLE, {"email": _normalize_email(email)})
        except NotFound:
            raise InvalidCredentials("Invalid email or password")

        if not verify_secret(secret, row["secret_hash"]):
            raise InvalidCredentials("Invalid email or password")

        self.access_token = create_session_token(row["id"], row["email"])
        return Identity(id=row["id"], email=row["email"])

    def create_identity(self, email: str, secret: str, profile: Optional[Dict[str, Any]] = None) -> Identity:
        email = _normalize_email(email)
        if self.store.count(IDENTITIES_TABLE, {"email": email}):
            raise AlreadyExists(f"An account with email {email} already exists")

        try:
            row = self.store.insert(IDENTITIES_TABLE, {
                "email": email,
                "secret_hash": hash_secret(secret),
                "profile": profile or {},
            })
        except ConstraintViolation:
            # lost a race against a concurrent sign-up with the same email
            raise AlreadyExists(f"An account with email {email} already exists")

        logger.info("Identity created", extra={"identity_id": row["id"], "action": "create_identity"})
        return Identity(id=row["id"], email=row["email"])

    def delete_identity(self, identity_id: str) -> None:
        deleted = self.store.delete(IDENTITIES_TABLE, {"id": identity_id})
        if not deleted:
            raise NotFound(f"Identity {identity_id} not found")
        logger.info("Identity deleted", extra={"identity_id": identity_id, "action": "delete_identity"})

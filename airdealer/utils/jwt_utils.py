"""JWT utilities - RS256 keypair management, session token signing and verification"""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from airdealer.config import settings
from airdealer.utils.logger import logger

# ---------------------------------------------------------------------------
# Keypair management
# ---------------------------------------------------------------------------

_private_key: Any = None   # cryptography RSAPrivateKey object
_public_key: Any = None    # cryptography RSAPublicKey object


def _load_keypair() -> None:
    """Load or auto-generate the RSA keypair.

    Reads JWT_PRIVATE_KEY from settings (PEM string).
    If absent, generates a fresh RSA-2048 keypair for this process; every
    session is then invalidated on restart.
    """
    global _private_key, _public_key

    from cryptography.hazmat.primitives import serialization
    from cryptography.hazmat.primitives.asymmetric import rsa

    if settings.JWT_PRIVATE_KEY:
        pem = settings.JWT_PRIVATE_KEY.encode()
        _private_key = serialization.load_pem_private_key(pem, password=None)
        _public_key = _private_key.public_key()
        logger.info("JWT keypair loaded from JWT_PRIVATE_KEY setting")
    else:
        _private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        _public_key = _private_key.public_key()
        logger.warning(
            "JWT_PRIVATE_KEY not set - auto-generated RSA-2048 keypair for this process. "
            "All sessions will be invalidated on restart."
        )


def get_private_key() -> Any:
    """Return the loaded private key, initialising on first call."""
    if _private_key is None:
        _load_keypair()
    return _private_key


def get_public_key() -> Any:
    """Return the loaded public key, initialising on first call."""
    if _public_key is None:
        _load_keypair()
    return _public_key


def _pem(key: Any, private: bool) -> bytes:
    from cryptography.hazmat.primitives import serialization

    if private:
        return key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    return key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


# ---------------------------------------------------------------------------
# Token creation
# ---------------------------------------------------------------------------

def create_session_token(identity_id: str, email: str) -> str:
    """Sign and return a session JWT for an identity.

    Args:
        identity_id: Value for the 'sub' claim.
        email:       Stored as 'email' claim for display only.

    Returns:
        Signed JWT string.
    """
    now = int(datetime.now(timezone.utc).timestamp())

    payload: Dict[str, Any] = {
        "sub": identity_id,
        "email": email,
        "jti": str(uuid.uuid4()),
        "iat": now,
        "exp": now + settings.JWT_SESSION_EXPIRE_SECONDS,
        "type": "session",
    }

    headers = {"kid": settings.JWT_KEY_ID} if settings.JWT_KEY_ID else None
    return jwt.encode(payload, _pem(get_private_key(), private=True), algorithm=settings.JWT_ALGORITHM, headers=headers)


# ---------------------------------------------------------------------------
# Token verification
# ---------------------------------------------------------------------------

def decode_session_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify a session JWT and return its payload, or None if it is not valid.

    Checks signature, expiry, the presence of 'sub' and 'jti', and the
    'session' type claim. Revocation is checked by the identity provider,
    which owns the blocklist table.
    """
    try:
        payload = jwt.decode(
            token,
            _pem(get_public_key(), private=False),
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError as exc:
        logger.debug(f"JWT decode failed: {exc}")
        return None

    if payload.get("type") != "session" or not payload.get("sub") or not payload.get("jti"):
        return None
    return payload

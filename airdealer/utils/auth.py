"""Password hashing utilities"""
import bcrypt

from airdealer.config import settings

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


def _encode(secret: str) -> bytes:
    return secret.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_secret(secret: str, rounds: int = None) -> str:
    """Hash a password with bcrypt and a fresh salt"""
    salt = bcrypt.gensalt(rounds=rounds or settings.PASSWORD_BCRYPT_ROUNDS)
    return bcrypt.hashpw(_encode(secret), salt).decode("ascii")


def verify_secret(secret: str, hashed: str) -> bool:
    """Check a password against a value produced by :func:`hash_secret`"""
    try:
        return bcrypt.checkpw(_encode(secret), hashed.encode("ascii"))
    except ValueError:
        # not a bcrypt hash
        return False

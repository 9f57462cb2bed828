"""RevokedToken model - jti blocklist for signed-out sessions"""
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from airdealer.database import Base


class RevokedToken(Base):
    """Stores revoked session token IDs (jti claims).

    ``sign_out`` inserts the current session's jti here and the identity
    provider refuses any token whose jti is present. ``expires_at`` mirrors the
    token's own exp so old rows can be pruned safely.
    """

    __tablename__ = "revoked_tokens"

    id = Column(Integer, primary_key=True, index=True)
    jti = Column(String(36), unique=True, nullable=False, index=True)
    revoked_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False)  # original token exp - for TTL cleanup

"""AuthIdentity model - credentials owned by the local identity provider"""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, JSON, String

from airdealer.database import Base


def generate_uuid_string():
    """Generate UUID as string for SQLite compatibility"""
    return str(uuid.uuid4())


class AuthIdentity(Base):
    """An authentication principal (email + hashed secret).

    Kept apart from ``admins``: deleting an admin record may leave the identity
    behind, in which case it simply classifies as ``no_admin_record`` again.
    """

    __tablename__ = "auth_identities"

    id = Column(String(36), primary_key=True, default=generate_uuid_string)
    email = Column(String(255), unique=True, nullable=False, index=True)
    secret_hash = Column(String(255), nullable=False)
    profile = Column(JSON, nullable=True)  # first_name / last_name supplied at sign-up
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

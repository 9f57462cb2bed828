"""AdminRecord model - one row per identity that requested back-office access"""
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from airdealer.database import Base


class AdminRecord(Base):
    """An administrator registration.

    Created unapproved at sign-up. Only an already-approved administrator may
    flip ``is_approved`` or delete the row, and never on their own record.
    """

    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    identity_id = Column(String(36), unique=True, nullable=False, index=True)  # auth_identities.id
    email = Column(String(255), nullable=False)
    first_name = Column(String(255), nullable=False, default="")
    last_name = Column(String(255), nullable=False, default="")
    role = Column(String(50), nullable=False, default="admin")
    is_approved = Column(Boolean, default=False, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=True)

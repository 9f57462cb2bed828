"""Access control gate for the administrative area.

Every authenticated identity lands in exactly one state:

    no_admin_record   never registered (or its record was deleted)
    pending_approval  registered, waiting for an approved admin
    approved          the only state allowed past the gate

``unauthenticated`` is reported when there is no session at all.
"""
from datetime import datetime
from enum import Enum
from typing import List, NamedTuple, Optional

from airdealer.config import settings
from airdealer.exceptions import (
    AirDealerError,
    AlreadyExists,
    AlreadyRegistered,
    ConstraintViolation,
    InvalidCredentials,
    NotFound,
    Unauthorized,
)
from airdealer.identity.base import Identity, IdentityProvider
from airdealer.store.base import Record, RecordStore
from airdealer.utils.logger import logger

ADMINS_TABLE = "admins"


class GateState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    NO_ADMIN_RECORD = "no_admin_record"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"


GATE_MESSAGES = {
    GateState.UNAUTHENTICATED: "Please sign in.",
    GateState.NO_ADMIN_RECORD: "You are not registered as an administrator. Please register first.",
    GateState.PENDING_APPROVAL: "Your administrator account is awaiting approval. Please contact the head administrator.",
    GateState.APPROVED: "Welcome to the admin panel.",
}

REGISTERED_MESSAGE = "Registration successful. Your account is awaiting administrator approval."


class GateResult(NamedTuple):
    """Outcome of a gate check. ``admin`` is set for pending and approved identities."""
    state: GateState
    identity: Optional[Identity] = None
    admin: Optional[Record] = None

    @property
    def is_approved(self) -> bool:
        return self.state is GateState.APPROVED

    @property
    def message(self) -> str:
        return GATE_MESSAGES[self.state]


class AdminListing(NamedTuple):
    items: List[Record]
    total: int
    approved_count: int
    pending_count: int


class AccessGate:
    """Classifies identities and manages admin registration/approval"""

    def __init__(self, store: RecordStore, identities: IdentityProvider):
        self.store = store
        self.identities = identities

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def _classify_id(self, identity_id: str, identity: Optional[Identity] = None) -> GateResult:
        try:
            record = self.store.find_one(ADMINS_TABLE, {"identity_id": identity_id})
        except NotFound:
            return GateResult(GateState.NO_ADMIN_RECORD, identity)

        if record["is_approved"]:
            return GateResult(GateState.APPROVED, identity, record)
        return GateResult(GateState.PENDING_APPROVAL, identity, record)

    def classify(self, identity: Identity) -> GateResult:
        """Classify an authenticated identity. Store failures propagate as ``Unavailable``."""
        return self._classify_id(identity.id, identity)

    def current_state(self) -> GateResult:
        identity = self.identities.get_current_identity()
        if identity is None:
            return GateResult(GateState.UNAUTHENTICATED)
        return self.classify(identity)

    def sign_in(self, email: str, secret: str) -> GateResult:
        """Authenticate, then keep the session only if the identity is approved"""
        identity = self.identities.sign_in(email, secret)
        try:
            result = self.classify(identity)
        except AirDealerError:
            self.identities.sign_out()
            raise

        if not result.is_approved:
            self.identities.sign_out()

        logger.info(
            f"Sign-in classified as {result.state.value}",
            extra={"identity_id": identity.id, "state": result.state.value, "action": "sign_in"},
        )
        return result

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        email: str,
        secret: str,
        first_name: str,
        last_name: str,
        identity: Optional[Identity] = None,
    ) -> Record:
        """Create an unapproved admin record, creating the identity first if needed.

        When the identity is created here and the record insert fails, the
        identity is deleted again before the error propagates. An identity
        passed in by the caller, or reclaimed by proving its secret, is never
        deleted.
        """
        created = False
        if identity is None:
            try:
                identity = self.identities.create_identity(
                    email, secret, {"first_name": first_name, "last_name": last_name}
                )
                created = True
            except AlreadyExists:
                identity = self._reclaim_identity(email, secret)

        if not created and self.store.count(ADMINS_TABLE, {"identity_id": identity.id}):
            raise AlreadyRegistered(f"{identity.email} is already registered as an administrator")

        now = datetime.utcnow()
        try:
            record = self.store.insert(ADMINS_TABLE, {
                "identity_id": identity.id,
                "email": identity.email,
                "first_name": first_name,
                "last_name": last_name,
                "role": settings.ADMIN_DEFAULT_ROLE,
                "is_approved": False,
                "created_at": now,
                "updated_at": now,
            })
        except ConstraintViolation:
            if created:
                self._rollback_identity(identity)
                raise
            raise AlreadyRegistered(f"{identity.email} is already registered as an administrator")
        except Exception:
            if created:
                self._rollback_identity(identity)
            raise

        logger.info(
            f"Admin registration pending approval: {identity.email}",
            extra={"identity_id": identity.id, "admin_id": record["id"], "action": "register"},
        )
        return record

    def _reclaim_identity(self, email: str, secret: str) -> Identity:
        """Take over an existing identity whose owner knows its secret.

        Covers identities orphaned by :meth:`delete_admin`. The session opened
        to verify the secret is closed again immediately.
        """
        try:
            identity = self.identities.sign_in(email, secret)
        except InvalidCredentials:
            raise AlreadyExists(f"An account with email {email} already exists")
        self.identities.sign_out()
        return identity

    def _rollback_identity(self, identity: Identity) -> None:
        logger.error(
            "Admin record creation failed, removing the identity created for it",
            extra={"identity_id": identity.id, "action": "register_rollback"},
        )
        try:
            self.identities.delete_identity(identity.id)
        except Exception as exc:
            logger.error(
                f"Rollback of identity {identity.id} failed: {exc}",
                extra={"identity_id": identity.id, "action": "register_rollback"},
                exc_info=True,
            )

    # ------------------------------------------------------------------
    # Administration (approved admins only)
    # ------------------------------------------------------------------

    def _require_approved(self, acting_identity_id: str) -> Record:
        result = self._classify_id(acting_identity_id)
        if not result.is_approved:
            raise Unauthorized(f"Approved administrator required (current state: {result.state.value})")
        return result.admin

    def _load_target(self, acting_identity_id: str, target_record_id: int, verb: str) -> Record:
        try:
            target = self.store.find_one(ADMINS_TABLE, {"id": target_record_id})
        except NotFound:
            raise NotFound(f"Admin {target_record_id} not found")

        if target["identity_id"] == acting_identity_id:
            raise Unauthorized(f"Administrators cannot {verb} themselves")
        return target

    def list_admins(self, acting_identity_id: str) -> AdminListing:
        self._require_approved(acting_identity_id)
        rows = self.store.find(ADMINS_TABLE, order_by="created_at", descending=True)

        items = [{**row, "is_current_user": row["identity_id"] == acting_identity_id} for row in rows]
        approved = sum(1 for row in rows if row["is_approved"])
        return AdminListing(items=items, total=len(rows), approved_count=approved, pending_count=len(rows) - approved)

    def set_approval(self, acting_identity_id: str, target_record_id: int, approve: bool) -> Record:
        """Approve or revoke another administrator"""
        self._require_approved(acting_identity_id)
        self._load_target(acting_identity_id, target_record_id, "approve or revoke")

        updated = self.store.update(
            ADMINS_TABLE,
            {"id": target_record_id},
            {"is_approved": approve, "updated_at": datetime.utcnow()},
        )
        if not updated:
            raise NotFound(f"Admin {target_record_id} not found")

        logger.info(
            f"Admin {target_record_id} {'approved' if approve else 'revoked'}",
            extra={
                "identity_id": acting_identity_id,
                "admin_id": target_record_id,
                "action": "approve_admin" if approve else "revoke_admin",
            },
        )
        return self.store.find_one(ADMINS_TABLE, {"id": target_record_id})

    def delete_admin(self, acting_identity_id: str, target_record_id: int) -> None:
        """Delete another administrator's record, then try to delete their identity.

        A failed identity deletion is logged and left as is: the orphaned
        identity simply classifies as ``no_admin_record`` from then on.
        """
        self._require_approved(acting_identity_id)
        target = self._load_target(acting_identity_id, target_record_id, "delete")

        if not self.store.delete(ADMINS_TABLE, {"id": target_record_id}):
            raise NotFound(f"Admin {target_record_id} not found")

        logger.info(
            f"Admin {target_record_id} deleted",
            extra={"identity_id": acting_identity_id, "admin_id": target_record_id, "action": "delete_admin"},
        )

        try:
            self.identities.delete_identity(target["identity_id"])
        except AirDealerError as exc:
            logger.warning(
                f"Admin {target_record_id} deleted but its identity could not be removed: {exc}",
                extra={"identity_id": target["identity_id"], "admin_id": target_record_id, "action": "delete_admin"},
            )

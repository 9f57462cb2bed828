"""Error taxonomy shared by the store adapters, the services and the HTTP layer.

Every error kind has its own ``code`` and a message ``category``. Callers
decide wording per category but must never merge them:

  informational  legitimate terminal outcome (nothing found, already exists)
  invalid        the request itself is wrong and retrying will not help
  retryable      transient or racy, refresh and try again
  forbidden      the actor lacks standing for the operation
"""


class AirDealerError(Exception):
    """Base class for all domain errors"""

    code = "error"
    category = "informational"
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class NotFound(AirDealerError):
    """A lookup found nothing"""

    code = "not_found"
    category = "informational"
    status_code = 404


class AlreadyExists(AirDealerError):
    """A record or identity with the same key already exists"""

    code = "already_exists"
    category = "informational"
    status_code = 409


class AlreadyRegistered(AlreadyExists):
    """The identity already has an admin record"""

    code = "already_registered"


class IllegalTransition(AirDealerError):
    """Order status change not present in the transition table"""

    code = "illegal_transition"
    category = "invalid"
    status_code = 422

    def __init__(self, current_status: str, target_status: str):
        super().__init__(f"Transition from '{current_status}' to '{target_status}' is not allowed")
        self.current_status = current_status
        self.target_status = target_status


class ConstraintViolation(AirDealerError):
    """The store rejected a write because of a schema constraint"""

    code = "constraint_violation"
    category = "invalid"
    status_code = 400


class ConcurrentModification(AirDealerError):
    """The stored state changed between read and conditional write"""

    code = "concurrent_modification"
    category = "retryable"
    status_code = 409


class Unavailable(AirDealerError):
    """Transient infrastructure failure (store or identity provider unreachable)"""

    code = "unavailable"
    category = "retryable"
    status_code = 503


class Unauthorized(AirDealerError):
    """Actor is not an approved admin, or attempted an action on itself"""

    code = "unauthorized"
    category = "forbidden"
    status_code = 403


class InvalidCredentials(AirDealerError):
    """Email/secret pair rejected by the identity provider"""

    code = "invalid_credentials"
    category = "forbidden"
    status_code = 401

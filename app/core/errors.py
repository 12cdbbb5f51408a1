# app/core/errors.py
from typing import Optional

from fastapi import HTTPException


class DomainError(HTTPException):
    """
    Base for every failure the service reports to callers.

    Each subclass carries a stable machine-checkable `kind` (and optionally a
    narrower `code`) next to the human-readable `detail`. Raised from services
    the same way HTTPException is, rendered by the handler in app.main.
    """
    kind = "domain_error"
    code: Optional[str] = None
    default_status = 400
    default_detail = "Request failed"

    def __init__(self, detail: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(
            status_code=status_code or self.default_status,
            detail=detail or self.default_detail,
        )

    def to_dict(self) -> dict:
        return {"kind": self.kind, "code": self.code or self.kind, "detail": self.detail}


class Unauthorized(DomainError):
    kind = "unauthorized"
    default_status = 401
    default_detail = "Unauthorized"

    @classmethod
    def forbidden(cls, detail: str) -> "Unauthorized":
        # Authenticated, but not the right actor
        return cls(detail, status_code=403)


class ValidationFailed(DomainError):
    kind = "validation_failed"
    default_status = 400
    default_detail = "Invalid input"


class ConflictAlreadyExists(DomainError):
    kind = "conflict_already_exists"
    default_status = 409
    default_detail = "Already exists"


class NotFound(DomainError):
    kind = "not_found"
    default_status = 404
    default_detail = "Not found"


class InvalidOperation(DomainError):
    kind = "invalid_operation"
    default_status = 400
    default_detail = "Operation not allowed"


class DependencyFailure(DomainError):
    kind = "dependency_failure"
    default_status = 503
    default_detail = "Backing store unavailable"


# ----- Merge tree -----

class InvalidMerge(InvalidOperation):
    code = "invalid_merge"
    default_detail = "Cannot merge party into itself"


class CycleDetected(InvalidOperation):
    code = "cycle_detected"
    default_detail = "Cannot create circular merge. The target party is already in your merge tree."


class NotMerged(InvalidOperation):
    code = "not_merged"
    default_detail = "Party is not merged"


class AlreadyMerged(ConflictAlreadyExists):
    code = "already_merged"
    default_detail = "Party is already merged. Demerge first."


# ----- Alliances -----

class AlreadyAllied(ConflictAlreadyExists):
    code = "already_allied"
    default_detail = "One or more parties are already in an alliance."

"""
Application error hierarchy.

Every error carries an HTTP status and a stable machine-readable code.
Handlers in teamspace.api.error_handlers turn them into JSON responses.
"""

from fastapi import status


class AppError(Exception):
    """Base class for errors raised by services and dependencies."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"
    default_message: str = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> dict:
        return {"detail": self.message, "code": self.code}


class BadRequest(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "bad_request"
    default_message = "Invalid request"


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"
    default_message = "Unauthorized"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_message = "Forbidden"


class NotAMember(Forbidden):
    code = "not_a_member"
    default_message = "You are not a member of this organization"


class InsufficientRole(Forbidden):
    code = "insufficient_role"
    default_message = "Only organization admins can perform this action"


class OwnerRequired(Forbidden):
    code = "owner_required"
    default_message = "Only the organization owner can perform this action"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Not found"


class InvalidToken(NotFound):
    code = "invalid_token"
    default_message = "Invalid invitation token"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    default_message = "Resource already exists"


class DuplicateInvitation(Conflict):
    code = "duplicate_invitation"
    default_message = "An invitation has already been sent to this email"


class InvitationExpired(AppError):
    status_code = status.HTTP_410_GONE
    code = "invitation_expired"
    default_message = "Invitation has expired"

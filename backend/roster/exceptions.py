from __future__ import annotations

from rest_framework import status


class RosterError(Exception):
    """Base class for errors the API reports back to the caller as `{message, code}`."""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "roster_error"
    default_message = "The request could not be completed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(RosterError):
    code = "validation_error"
    default_message = "Invalid input."


class MemberUnavailable(ValidationError):
    code = "member_unavailable"
    default_message = "This member has not marked themselves available for that date."


class DuplicateAssignmentConflict(RosterError):
    status_code = status.HTTP_409_CONFLICT
    code = "duplicate_assignment"
    default_message = "This member already holds another role on that date."


class RoleCapacityExceeded(RosterError):
    status_code = status.HTTP_409_CONFLICT
    code = "role_capacity_exceeded"
    default_message = "This role is already full for that date."


class NotFoundError(RosterError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Record not found."


class ConflictOnDelete(RosterError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict_on_delete"
    default_message = "The record is still referenced and cannot be deleted."


class UnauthorizedError(RosterError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "unauthorized"
    default_message = "You are not allowed to perform this action."


class DeadlineExceededNotice(RosterError):
    """Availability change refused because the month's deadline has passed.

    Not an error for the client: views turn it into a notice payload so the UI
    can show a dialog instead of a failure toast.
    """
    status_code = status.HTTP_200_OK
    code = "deadline_exceeded"
    default_message = "The availability deadline for this month has passed."

    def __init__(self, deadline_day: int, message: str | None = None):
        self.deadline_day = deadline_day
        super().__init__(
            message or f"Availability for this month was locked on day {deadline_day}. "
                       "Please contact an administrator to change it."
        )

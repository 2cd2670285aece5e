"""
Domain errors raised by the repository and service layers.

The HTTP boundary maps each class to ``status_code`` through the exception
handler registered in ``arena.app``; nothing below the routers knows about
HTTP beyond that number.
"""

from typing import Optional


class ArenaError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)


# ==================== NOT FOUND ====================

class NotFoundError(ArenaError):
    """Entity not found"""
    status_code = 404
    code = "not_found"


class UserNotFound(NotFoundError):
    """User not found"""
    code = "user_not_found"


class ChallengeNotFound(NotFoundError):
    """Challenge not found"""
    code = "challenge_not_found"


class SubmissionNotFound(NotFoundError):
    """Submission not found"""
    code = "submission_not_found"


# ==================== CONFLICT ====================

class ConflictError(ArenaError):
    """Conflicting state"""
    status_code = 409
    code = "conflict"


class DuplicateSubmission(ConflictError):
    """User has already submitted a solution for this challenge"""
    code = "duplicate_submission"


class AlreadyReviewed(ConflictError):
    """Submission has already been reviewed"""
    code = "already_reviewed"


class UserAlreadyExists(ConflictError):
    """User already exists"""
    code = "user_already_exists"


# ==================== INVALID STATE ====================

class InvalidStateError(ArenaError):
    """Operation not allowed in the current state"""
    status_code = 400
    code = "invalid_state"


class ChallengeInactive(InvalidStateError):
    """Challenge is not active"""
    code = "challenge_inactive"


class ChallengeNotStarted(InvalidStateError):
    """Challenge has not started yet"""
    code = "challenge_not_started"


class ChallengeExpired(InvalidStateError):
    """Challenge has ended"""
    code = "challenge_expired"


class InvalidReviewStatus(InvalidStateError):
    """Review outcome must be APPROVED or REJECTED"""
    code = "invalid_review_status"


# ==================== REQUEST / ACCESS ====================

class ValidationError(ArenaError):
    """Missing or invalid fields"""
    status_code = 400
    code = "validation_error"


class UnauthorizedError(ArenaError):
    """Authentication required"""
    status_code = 401
    code = "unauthorized"


class ForbiddenError(ArenaError):
    """Access denied"""
    status_code = 403
    code = "forbidden"

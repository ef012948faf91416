# src/utils/errors.py
from typing import Any, Optional


class AppError(Exception):
    """Error de dominio; los handlers de main.py lo traducen a la respuesta uniforme."""

    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, error: Any = None):
        self.message = message or self.default_message
        self.error = error
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 422
    default_message = "Invalid input"


class DurationFormatError(ValidationError):
    default_message = "Invalid video playback time! Use HH:MM:SS format."


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Resource already exists"


class DuplicateRatingError(ConflictError):
    default_message = "Rating is already given for this course"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Forbidden"


class ExternalServiceError(AppError):
    status_code = 502
    default_message = "External service unavailable"


class WebhookSignatureError(ExternalServiceError):
    status_code = 400
    default_message = "Webhook signature verification failed"


class IntegrityError(AppError):
    status_code = 409
    default_message = "Data integrity violation"


class DegenerateCourseError(IntegrityError):
    default_message = "Course has no subtopics; progress cannot be computed"

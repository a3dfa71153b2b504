"""
Error handling utilities
"""

from typing import Optional
from taskboard.models.response import ErrorResponse
from taskboard.utils.logger import logger


class BoardError(Exception):
    """Base exception for board errors"""
    pass


class StoreError(BoardError):
    """Remote document store error"""
    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class SubscriptionError(StoreError):
    """Remote listener failed; the last good snapshot stays in place"""
    pass


class WriteError(StoreError):
    """Create, update or delete was rejected by the store"""
    pass


class DocumentExistsError(WriteError):
    """Create-with-id hit an id that is already taken"""
    pass


class DocumentNotFoundError(WriteError):
    """Update or delete targeted a document that does not exist"""
    pass


class ValidationError(BoardError):
    """Input rejected locally, before anything is sent to the store"""
    pass


def handle_error(error: Exception) -> ErrorResponse:
    """
    Handle error and return user-friendly message

    Args:
        error: Exception to handle

    Returns:
        ErrorResponse with user-friendly message
    """
    logger.error(f"Error occurred: {error}", exc_info=error)

    if isinstance(error, ValidationError):
        return ErrorResponse(
            message=f"Invalid input: {str(error)}",
            error_code="validation",
        )

    if isinstance(error, DocumentExistsError):
        return ErrorResponse(
            message="The item already exists. Please try again.",
            error_code=error.error_code or "already-exists",
        )

    if isinstance(error, DocumentNotFoundError):
        return ErrorResponse(
            message="The item no longer exists.",
            error_code=error.error_code or "not-found",
        )

    if isinstance(error, StoreError):
        return ErrorResponse(
            message=f"Storage error: {error.message}",
            error_code=error.error_code,
        )

    # Generic error message
    return ErrorResponse(
        message="Something went wrong. Please try again later.",
    )


def format_error_message(error: Exception) -> str:
    """
    Format error message for user

    Args:
        error: Exception to format

    Returns:
        User-friendly error message
    """
    error_response = handle_error(error)
    return error_response.message

"""
Exam Practice Coach - Error Taxonomy
Domain exceptions and the API boundary handler that hides internal details.
"""
import logging
import time
import uuid
from typing import Optional

from fastapi import status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PracticeError(Exception):
    """Base class for all practice pipeline errors."""


class ValidationError(PracticeError):
    """A request field is missing, blank or out of range (HTTP 400)."""


class UpstreamCallError(PracticeError):
    """The model provider could not be reached or answered with an error."""

    def __init__(self, message: str, retryable: bool = True):
        self.retryable = retryable
        super().__init__(message)


class MalformedResponse(PracticeError):
    """The model reply did not contain a parseable JSON object."""


class SchemaViolation(PracticeError):
    """The model reply parsed as JSON but broke the expected schema."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"Invalid or missing field: {field}")


class InvalidEvaluation(SchemaViolation):
    """An evaluation reply failed schema checks."""


class InvalidGeneration(SchemaViolation):
    """A question generation reply failed schema checks."""


def describe_validation_errors(errors: list) -> str:
    """One-line message for the first pydantic error, e.g. "numQuestions: Input should be ..."."""
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def generate_error_id() -> str:
    """Correlation id shared between the client response and server logs."""
    return f"err_{int(time.time() * 1000)}_{uuid.uuid4().hex[:7]}"


def log_error(error: BaseException, context_message: str) -> str:
    """Log an error with its stack trace under a fresh correlation id."""
    error_id = generate_error_id()
    logger.error(
        "[%s] %s: %s",
        error_id,
        context_message,
        error,
        exc_info=(type(error), error, error.__traceback__),
    )
    return error_id


def handle_api_error(
    error: BaseException,
    context_message: str,
    client_message: str,
) -> JSONResponse:
    """
    Log the full error server-side and return a generic 500 response.

    Args:
        error: The exception raised while serving the request.
        context_message: Where the error occurred, for the server log.
        client_message: Generic message safe to show to the client.

    Returns:
        JSONResponse with the generic message and the correlation id.
    """
    error_id = log_error(error, context_message)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": client_message, "errorId": error_id},
    )

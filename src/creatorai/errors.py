"""
Error taxonomy shared by the generation session, the regeneration dispatcher
and the HTTP layer.

Producer-side failures are classified exactly once, where the producer call
returns, and then travel up unchanged. Tree edit rejections are not errors:
they are returned as `TreeEditResult` values by `file_manager`.
"""
import json
import logging
from typing import Optional

from google.api_core import exceptions as google_exceptions
from langchain_core.exceptions import OutputParserException
from pydantic import ValidationError

logger = logging.getLogger(__name__)

OVERLOADED_MARKERS = ("503", "overloaded", "resource exhausted", "rate limit", "429")


class GenerationError(Exception):
    """Base class for every error surfaced to a user as one notification."""
    kind = "generation_error"
    user_message = "An unexpected error occurred during generation."

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message or self.user_message)
        self.cause = cause


class ProducerFailure(GenerationError):
    kind = "producer_failure"
    user_message = "Content generation failed. Please try again."


class OverloadedFailure(ProducerFailure):
    kind = "overloaded"
    user_message = "The model is overloaded. Please try again later."


class MalformedResponse(ProducerFailure):
    kind = "malformed_response"
    user_message = "The AI returned an unexpected response. Generation stopped."


class StaleAddress(GenerationError):
    """An index-bearing part address that no longer fits its list."""
    kind = "stale_address"
    user_message = "This item changed since it was selected. Please select it again."


class UnknownPart(GenerationError):
    kind = "unknown_part"
    user_message = "This part of the document cannot be regenerated."


def _is_overloaded(exc: BaseException) -> bool:
    if isinstance(exc, (google_exceptions.ResourceExhausted, google_exceptions.ServiceUnavailable)):
        return True
    text = str(exc).lower()
    return any(marker in text for marker in OVERLOADED_MARKERS)


def classify_producer_error(exc: BaseException, stage: str = "") -> GenerationError:
    """Turns any exception raised around a producer call into one taxonomy error."""
    if isinstance(exc, GenerationError):
        return exc

    if isinstance(exc, (json.JSONDecodeError, OutputParserException)):
        error = MalformedResponse(f"JSON_PARSE_ERROR: {exc}", cause=exc)
    elif isinstance(exc, ValidationError):
        error = ProducerFailure(f"Schema validation failed: {exc}", cause=exc)
    elif _is_overloaded(exc):
        error = OverloadedFailure(str(exc), cause=exc)
    else:
        error = ProducerFailure(str(exc) or exc.__class__.__name__, cause=exc)

    logger.error("--- Producer call failed (%s) during '%s': %s ---", error.kind, stage or "unknown stage", exc,
                 exc_info=exc)
    return error


def user_message(exc: BaseException, fallback: Optional[str] = None) -> str:
    """The single user-facing message for an error."""
    if isinstance(exc, (OverloadedFailure, MalformedResponse, StaleAddress, UnknownPart)):
        return exc.user_message
    if isinstance(exc, GenerationError):
        return str(exc) if fallback is None else fallback
    return fallback or GenerationError.user_message

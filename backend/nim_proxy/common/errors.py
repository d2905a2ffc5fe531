"""
Error Definitions

Defines the exception classes used for the OpenAI-style error envelope and
maps backend failures onto them.
"""

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class AppError(Exception):
    """
    Application Base Exception

    Base class for all custom exceptions, containing error message, type and HTTP status.
    The envelope ``code`` mirrors the HTTP status, as OpenAI clients expect.
    """

    def __init__(
        self,
        message: str,
        error_type: str = "internal_error",
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None,
    ):
        """
        Initialize exception

        Args:
            message: Error message
            error_type: Error type
            status_code: HTTP status code
            details: Extra error details, only rendered in debug mode
        """
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.status_code = status_code
        self.details = details or {}

    @property
    def code(self) -> int:
        return self.status_code

    def to_dict(self, include_details: bool = False) -> dict[str, Any]:
        """
        Convert to dictionary format (for API response)

        Args:
            include_details: Whether to add ``details`` to the envelope

        Returns:
            dict: Error information dictionary
        """
        result = {
            "error": {
                "message": self.message,
                "type": self.error_type,
                "code": self.code,
            }
        }
        if include_details and self.details:
            result["error"]["details"] = self.details
        return result


class ValidationError(AppError):
    """
    Request Validation Error

    Raised when the inbound chat request is malformed. Always reported before
    any backend call is made.
    """

    def __init__(
        self,
        message: str = "Invalid request",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="invalid_request_error",
            status_code=400,
            details=details,
        )


class NotFoundError(AppError):
    """
    Endpoint Not Found Error
    """

    def __init__(self, message: str = "Not found"):
        super().__init__(
            message=message,
            error_type="invalid_request_error",
            status_code=404,
        )


class PayloadTooLargeError(AppError):
    """
    Request Body Too Large Error
    """

    def __init__(self, limit: int):
        super().__init__(
            message=f"Request body exceeds the {limit} byte limit",
            error_type="invalid_request_error",
            status_code=413,
            details={"limit": limit},
        )


class UpstreamError(AppError):
    """
    Upstream Service Error

    Raised when the NIM backend answers with a non-2xx status or cannot be
    reached. Carries the backend's status, or 500 when there is none.
    """

    def __init__(
        self,
        message: str = "Upstream service error",
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="upstream_error",
            status_code=status_code,
            details=details,
        )


def upstream_status_error(status_code: int, body: Any) -> UpstreamError:
    """
    Build the error for a backend HTTP error response.

    The backend body is logged for operators and kept out of the caller
    envelope (it is only exposed as ``details`` in debug mode).

    Args:
        status_code: Backend HTTP status
        body: Backend response body (parsed JSON, text or bytes)

    Returns:
        UpstreamError: Error propagating the backend status
    """
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8", errors="replace")
    logger.error("API error details: status=%s body=%s", status_code, body)
    return UpstreamError(
        message=f"Request failed with status code {status_code}",
        status_code=status_code,
        details={"upstream_body": body},
    )


def map_upstream_exception(exc: Exception) -> AppError:
    """
    Map a transport-level failure to the caller-facing error.

    Args:
        exc: Exception raised while talking to the backend

    Returns:
        AppError: Error to render for the caller
    """
    if isinstance(exc, AppError):
        return exc
    if isinstance(exc, httpx.TimeoutException):
        logger.error("Backend request timed out: %s", exc)
        return UpstreamError(message=f"Request timeout: {exc}", status_code=500)
    if isinstance(exc, httpx.HTTPStatusError):
        return upstream_status_error(exc.response.status_code, exc.response.text)
    if isinstance(exc, httpx.RequestError):
        logger.error("Backend request failed: %s", exc)
        return UpstreamError(message=f"Request error: {exc}", status_code=500)
    logger.error("Proxy error: %s", exc, exc_info=True)
    return AppError(message=str(exc) or "Internal server error")

"""Error classifiers for provider HTTP failures.

Converts HTTP responses and ``requests`` exceptions raised while calling
external providers into OperationResult objects.

Usage:
    from infrastructure.operations.classifiers import (
        classify_http_response,
        classify_request_exception,
    )

    try:
        response = requests.post(url, ...)
    except requests.RequestException as exc:
        return classify_request_exception(exc)
    if response.status_code != 201:
        return classify_http_response(response, provider="GC Notify")
"""

import requests

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

DEFAULT_RETRY_AFTER = 60


def classify_http_response(
    response: requests.Response, provider: str = "Provider"
) -> OperationResult:
    """Classify a non-success HTTP response.

    Status Code Mapping:
    - 429: Rate limiting -> TRANSIENT_ERROR with retry_after
    - 401/403: Credentials rejected -> UNAUTHORIZED
    - 404: Not found -> NOT_FOUND
    - 5xx: Server error -> TRANSIENT_ERROR
    - Other: PERMANENT_ERROR
    """
    status_code = response.status_code

    if status_code == 429:
        retry_after = DEFAULT_RETRY_AFTER
        header_value = response.headers.get("Retry-After")
        if header_value:
            try:
                retry_after = int(header_value)
            except (TypeError, ValueError):
                retry_after = DEFAULT_RETRY_AFTER
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            f"{provider} rate limited",
            error_code="RATE_LIMITED",
            retry_after=retry_after,
        )

    if status_code in (401, 403):
        return OperationResult.error(
            OperationStatus.UNAUTHORIZED,
            f"{provider} rejected credentials ({status_code})",
            error_code="UNAUTHORIZED",
        )

    if status_code == 404:
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            f"{provider} resource not found",
            error_code="NOT_FOUND",
        )

    if 500 <= status_code < 600:
        return OperationResult.transient_error(
            f"{provider} server error ({status_code})",
            error_code="SERVER_ERROR",
        )

    return OperationResult.permanent_error(
        f"{provider} client error ({status_code}): {response.text[:200]}",
        error_code="HTTP_ERROR",
    )


def classify_request_exception(exc: Exception) -> OperationResult:
    """Classify a transport-level failure (timeout, connection reset)."""
    if isinstance(exc, requests.Timeout):
        return OperationResult.transient_error(
            f"Request timed out: {exc}", error_code="TIMEOUT"
        )
    if isinstance(exc, requests.ConnectionError):
        return OperationResult.transient_error(
            f"Connection error: {exc}", error_code="CONNECTION_ERROR"
        )
    return OperationResult.permanent_error(
        f"{type(exc).__name__}: {exc}", error_code="REQUEST_ERROR"
    )

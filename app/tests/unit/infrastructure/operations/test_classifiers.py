"""Unit tests for HTTP error classification."""

from unittest.mock import MagicMock

import pytest
import requests

from infrastructure.operations import OperationResult, OperationStatus
from infrastructure.operations.classifiers import (
    DEFAULT_RETRY_AFTER,
    classify_http_response,
    classify_request_exception,
)


def _response(status_code, headers=None, text=""):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.headers = headers or {}
    response.text = text
    return response


@pytest.mark.unit
class TestClassifyHttpResponse:
    def test_rate_limited_uses_retry_after_header(self):
        result = classify_http_response(_response(429, {"Retry-After": "12"}))

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.error_code == "RATE_LIMITED"
        assert result.retry_after == 12
        assert result.is_retryable

    def test_rate_limited_with_bad_header_uses_default(self):
        result = classify_http_response(_response(429, {"Retry-After": "soon"}))

        assert result.retry_after == DEFAULT_RETRY_AFTER

    @pytest.mark.parametrize("status_code", [401, 403])
    def test_rejected_credentials(self, status_code):
        result = classify_http_response(_response(status_code), provider="GC Notify")

        assert result.status == OperationStatus.UNAUTHORIZED
        assert "GC Notify" in result.message

    def test_not_found(self):
        assert (
            classify_http_response(_response(404)).status == OperationStatus.NOT_FOUND
        )

    def test_server_error_is_transient(self):
        result = classify_http_response(_response(503))

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.error_code == "SERVER_ERROR"

    def test_client_error_is_permanent_and_truncated(self):
        result = classify_http_response(_response(400, text="x" * 500))

        assert result.status == OperationStatus.PERMANENT_ERROR
        assert result.error_code == "HTTP_ERROR"
        assert len(result.message) < 300


@pytest.mark.unit
class TestClassifyRequestException:
    def test_timeout_is_transient(self):
        result = classify_request_exception(requests.Timeout("read timed out"))

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.error_code == "TIMEOUT"

    def test_connection_error_is_transient(self):
        result = classify_request_exception(requests.ConnectionError("reset"))

        assert result.error_code == "CONNECTION_ERROR"

    def test_other_errors_are_permanent(self):
        result = classify_request_exception(ValueError("bad url"))

        assert result.status == OperationStatus.PERMANENT_ERROR
        assert result.message == "ValueError: bad url"


@pytest.mark.unit
class TestOperationResult:
    def test_success(self):
        result = OperationResult.success(data={"id": "1"})

        assert result.is_success
        assert not result.is_retryable
        assert result.data == {"id": "1"}

    def test_permanent_error_is_not_retryable(self):
        result = OperationResult.permanent_error("nope", error_code="BAD")

        assert not result.is_success
        assert not result.is_retryable

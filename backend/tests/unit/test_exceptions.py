"""
Unit tests for custom exception classes.
"""

import pytest
from domain.exceptions import (
    CodeTableUnavailableError,
    ConfigurationError,
    DeliveryError,
    GenerationError,
    InvalidSignatureError,
    ReplyExpiredError,
    SelectionError,
)
from domain.value_objects.enums import GenerationErrorKind


class TestHTTPExceptions:
    @pytest.mark.unit
    def test_invalid_signature(self):
        exc = InvalidSignatureError()

        assert exc.status_code == 401
        assert "signature" in exc.detail

    @pytest.mark.unit
    def test_code_table_unavailable(self):
        exc = CodeTableUnavailableError("not configured")

        assert exc.status_code == 503
        assert exc.detail == "Code table unavailable: not configured"


class TestDomainExceptions:
    @pytest.mark.unit
    def test_configuration_error_is_value_error(self):
        exc = ConfigurationError("bad template")

        assert isinstance(exc, ValueError)
        assert str(exc) == "Configuration error: bad template"

    @pytest.mark.unit
    def test_selection_error_keeps_context(self):
        cause = RuntimeError("locked")
        exc = SelectionError("G1", cause)

        assert exc.conversation_id == "G1"
        assert exc.cause is cause
        assert "G1" in str(exc)

    @pytest.mark.unit
    def test_generation_error_kind(self):
        assert GenerationError(GenerationErrorKind.RATE_LIMIT_EXCEEDED).is_rate_limited
        assert not GenerationError(GenerationErrorKind.UPSTREAM, RuntimeError("500")).is_rate_limited

    @pytest.mark.unit
    def test_reply_expired_is_delivery_error(self):
        exc = ReplyExpiredError("Invalid reply token", status_code=400)

        assert isinstance(exc, DeliveryError)
        assert exc.status_code == 400

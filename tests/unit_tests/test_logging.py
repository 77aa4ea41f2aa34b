"""Test suite for logging configuration and request context."""

import json
from unittest.mock import MagicMock
from unittest.mock import patch

import pytest

from reqflow_api.monitoring.logger import configure_logger
from reqflow_api.monitoring.logger import get_formatted_stacktrace
from reqflow_api.monitoring.logger import log_response_info
from reqflow_api.monitoring.logger import process_log_record
from reqflow_api.monitoring.request_context import RequestContextMiddleware
from reqflow_api.monitoring.request_context import get_request_context
from reqflow_api.routes import routes_requests
from tests.consts import API_BASE
from tests.consts import IMPLEMENTATION_MANAGER_HEADERS
from tests.consts import SAFETY_EQUIPMENT_PAYLOAD


class TestLoggerConfiguration:
    """Tests for the stdout loguru sink."""

    @patch("reqflow_api.monitoring.logger.logger")
    def test_configure_logger(self, mock_logger):
        """Default sink is replaced by one stdout sink at the requested level."""
        configure_logger(level="debug")

        mock_logger.remove.assert_called_once()
        kwargs = mock_logger.add.call_args[1]
        assert kwargs["level"] == "DEBUG"
        assert kwargs["diagnose"] is False
        assert kwargs["filter"] is process_log_record

    def test_process_log_record_serializes_extra(self):
        record = {"extra": {"request_id": "SR-100", "version": 2}, "exception": None}

        result = process_log_record(record)

        assert json.loads(result["extra"]) == {"request_id": "SR-100", "version": 2}
        assert result["stacktrace"] == ""

    def test_process_log_record_adds_stacktrace(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError as e:
            exception = (type(e), e, e.__traceback__)

        result = process_log_record({"extra": {}, "exception": exception})

        assert "RuntimeError: boom" in result["stacktrace"]
        assert "\n" not in result["stacktrace"]

    def test_get_formatted_stacktrace_keeps_newlines(self):
        try:
            raise ValueError("bad")
        except ValueError as e:
            stacktrace = get_formatted_stacktrace((type(e), e, e.__traceback__), False)

        assert stacktrace.endswith("ValueError: bad\n")

    @patch("reqflow_api.monitoring.logger.logger")
    def test_log_response_info(self, mock_logger):
        response = MagicMock()
        response.status_code = 409
        response.headers = {"content-type": "application/json"}

        log_response_info(response)

        info = mock_logger.debug.call_args[1]["http_response"]
        assert info["status_code"] == 409


class TestRequestContextMiddleware:
    """Tests for request context capture."""

    @pytest.mark.parametrize(
        "headers,expected",
        [
            ({"X-Actor-Name": "Morgan", "X-Actor-Role": "Implementation_Manager"}, "Morgan (implementation_manager)"),
            ({"X-Actor-Name": "Morgan"}, "Morgan"),
            ({"X-Actor-Role": "ehs"}, "ehs"),
            ({}, "anonymous"),
        ],
        ids=["name_and_role", "name_only", "role_only", "anonymous"],
    )
    def test_actor_identity(self, headers, expected):
        middleware = RequestContextMiddleware(app=MagicMock())
        request = MagicMock()
        request.headers = headers

        assert middleware._get_actor_identity(request) == expected

    def test_client_ip_prefers_forwarded_for(self):
        middleware = RequestContextMiddleware(app=MagicMock())
        request = MagicMock()
        request.headers = {"X-Forwarded-For": "10.0.0.1, 10.0.0.2"}

        assert middleware._get_client_ip(request) == "10.0.0.1"

    def test_generated_request_id_header(self, client):
        """A request id is generated when the caller does not send one."""
        response = client.get(f"{API_BASE}/requests")

        assert len(response.headers["X-Request-ID"]) == 36

    def test_context_is_bound_for_handlers(self, client):
        """Handlers see the caller identity in the request context."""
        seen = {}

        original = routes_requests.logger.info

        def capture(message, *args, **kwargs):
            if message == "Applying transition":
                seen.update(get_request_context())
            return original(message, *args, **kwargs)

        client.post(
            f"{API_BASE}/requests",
            json={"kind": "safety-equipment", "payload": SAFETY_EQUIPMENT_PAYLOAD, "request_id": "SR-100"},
        )
        with patch.object(routes_requests.logger, "info", side_effect=capture):
            client.post(
                f"{API_BASE}/requests/SR-100/transitions",
                json={"action": "acknowledge"},
                headers={**IMPLEMENTATION_MANAGER_HEADERS, "X-Request-ID": "trace-7"},
            )

        assert seen["request_id"] == "trace-7"
        assert seen["actor_identity"] == "Ines IM (implementation_manager)"
        assert seen["request_path"] == "POST /api/requests/SR-100/transitions"

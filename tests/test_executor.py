"""Tests for request execution and output formatting."""

from unittest.mock import MagicMock, patch

import requests

from ferrapi.executor import execute_request, format_output
from tests.conftest import make_request_result


def _response(status=200, text="", headers=None):
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    resp.headers = headers or {}
    return resp


class TestExecuteRequest:
    @patch("ferrapi.executor.requests.request")
    def test_json_body_sent(self, mock_req):
        mock_req.return_value = _response(201, '{"id": 1}')
        result = execute_request(
            "post",
            "http://localhost/api",
            headers={"X-A": "1"},
            body={"name": "test"},
            timeout=5,
        )
        mock_req.assert_called_once_with(
            method="POST",
            url="http://localhost/api",
            headers={"X-A": "1"},
            timeout=5,
            allow_redirects=True,
            json={"name": "test"},
        )
        assert result.status_code == 201
        assert result.raw_text == '{"id": 1}'
        assert result.error is None

    @patch("ferrapi.executor.requests.request")
    def test_string_body_sent_as_json_string(self, mock_req):
        mock_req.return_value = _response()
        execute_request("PUT", "http://x", body="plain")
        _, kwargs = mock_req.call_args
        assert kwargs["json"] == "plain"

    @patch("ferrapi.executor.requests.request")
    def test_no_body(self, mock_req):
        mock_req.return_value = _response()
        execute_request("GET", "http://x")
        _, kwargs = mock_req.call_args
        assert "json" not in kwargs
        assert kwargs["timeout"] == 30

    @patch("ferrapi.executor.requests.request")
    def test_body_text_unmodified(self, mock_req):
        mock_req.return_value = _response(200, "<html>  raw </html>", {"Server": "t"})
        result = execute_request("GET", "http://x")
        assert result.raw_text == "<html>  raw </html>"
        assert result.headers == {"Server": "t"}

    @patch("ferrapi.executor.requests.request")
    def test_timeout(self, mock_req):
        mock_req.side_effect = requests.exceptions.Timeout()
        result = execute_request("GET", "http://x", timeout=3)
        assert result.error == "Request timed out after 3s"

    @patch("ferrapi.executor.requests.request")
    def test_connection_error(self, mock_req):
        mock_req.side_effect = requests.exceptions.ConnectionError("refused")
        result = execute_request("GET", "http://x")
        assert result.error.startswith("Connection error")

    @patch("ferrapi.executor.requests.request")
    def test_other_request_failure(self, mock_req):
        mock_req.side_effect = requests.exceptions.InvalidURL("bad")
        result = execute_request("GET", "http://x")
        assert result.error.startswith("Request failed")

    @patch("ferrapi.executor.requests.request")
    def test_non_latin1_header_reported_not_raised(self, mock_req):
        mock_req.side_effect = UnicodeEncodeError(
            "latin-1", "日本", 0, 2, "ordinal not in range(256)"
        )
        result = execute_request("GET", "http://x", headers={"X-Name": "日本"})
        assert result.error.startswith("Unexpected error")
        assert "latin-1" in result.error


class TestFormatOutput:
    def test_default(self):
        out = format_output(make_request_result(200, '{"a": 1}'))
        assert out == 'STATUS: 200\nTIME: 42ms\nBODY:\n{"a": 1}'

    def test_verbose_headers(self):
        out = format_output(
            make_request_result(200, "ok", headers={"Content-Type": "text/plain"}),
            verbose=True,
        )
        assert "HEADERS:\n  Content-Type: text/plain" in out

    def test_raw(self):
        assert format_output(make_request_result(500, "boom"), raw=True) == "boom"

    def test_error(self):
        assert format_output(make_request_result(error="nope")) == "ERROR: nope"

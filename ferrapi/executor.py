"""ferrapi executor - HTTP request execution."""

import time
from typing import Any

import requests


class RequestResult:
    """Result of an HTTP request."""

    def __init__(self):
        self.status_code: int = 0
        self.headers: dict[str, str] = {}
        self.elapsed_ms: float = 0
        self.error: str | None = None
        self.raw_text: str = ""


def execute_request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
    body: Any = None,
    timeout: int = 30,
) -> RequestResult:
    """Execute an HTTP request and return structured result.

    - Sends body (any JSON value) as JSON when it is not None
    - Keeps the response text unmodified
    - Captures timing
    - Never raises - always returns RequestResult with error field set
    """
    result = RequestResult()

    try:
        kwargs: dict[str, Any] = {
            "method": method.upper(),
            "url": url,
            "headers": headers or None,
            "timeout": timeout,
            "allow_redirects": True,
        }
        if body is not None:
            kwargs["json"] = body

        start = time.monotonic()
        resp = requests.request(**kwargs)
        result.elapsed_ms = (time.monotonic() - start) * 1000

        result.status_code = resp.status_code
        result.headers = dict(resp.headers)
        result.raw_text = resp.text

    except requests.exceptions.Timeout:
        result.error = f"Request timed out after {timeout}s"
    except requests.exceptions.ConnectionError as e:
        result.error = f"Connection error: {e}"
    except requests.exceptions.RequestException as e:
        result.error = f"Request failed: {e}"
    except Exception as e:
        result.error = f"Unexpected error: {e}"

    return result


def format_output(result: RequestResult, verbose: bool = False, raw: bool = False) -> str:
    """Format the request result for CLI output.

    The body text is printed exactly as received.
    """
    if result.error:
        return f"ERROR: {result.error}"

    if raw:
        return result.raw_text

    lines: list[str] = [
        f"STATUS: {result.status_code}",
        f"TIME: {int(result.elapsed_ms)}ms",
    ]

    if verbose and result.headers:
        lines.append("HEADERS:")
        for key, value in result.headers.items():
            lines.append(f"  {key}: {value}")

    lines.append("BODY:")
    lines.append(result.raw_text)

    return "\n".join(lines)

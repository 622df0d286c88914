"""
# Ping History HTTP Client

Thin wrapper around the recording endpoint: every path on the service is
stored in the history table and echoed back as

    Value inserted: <path>

## Usage
from pinghistory.client import PingClient

client = PingClient("http://127.0.0.1:8080")
print(client.record("hello"))          # -> "hello"
print(client.record("a/b", method="POST"))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import requests

CONFIRMATION_PREFIX = "Value inserted: "


class PingApiError(RuntimeError):
    """
    Exception raised when the service returns a non-2xx response.
    """

    def __init__(self, status_code: int, message: str, url: str, details: Optional[Any] = None) -> None:
        super().__init__(f"[PingApiError] {status_code} {message} | url={url} | details={details}")
        self.status_code = status_code
        self.message = message
        self.url = url
        self.details = details


@dataclass(frozen=True)
class PingClient:
    """
    A small client for the ping history service.

    Attributes:
        base_url: Base URL for the service, e.g. "http://127.0.0.1:8080"
        timeout_s: Request timeout in seconds.
        session: Optional requests.Session for connection reuse.
    """

    base_url: str
    timeout_s: float = 10.0
    session: Optional[requests.Session] = None

    def _url(self, path: str) -> str:
        """
        Build a full URL for a path to record; the path is percent-encoded.
        """
        return f"{self.base_url.rstrip('/')}/{quote(path.lstrip('/'), safe='/')}"

    def record(self, path: str, method: str = "GET") -> str:
        """
        Ask the service to record `path`.

        Args:
            path: Value to record (a leading "/" is ignored).
            method: HTTP method; the service treats all methods the same.

        Returns:
            The value the service reports as inserted.

        Raises:
            PingApiError: If the server returns a non-2xx response.
            requests.RequestException: For network errors/timeouts.
            ValueError: If the body is not a confirmation.
        """
        url = self._url(path)
        sess = self.session or requests

        resp = sess.request(method=method, url=url, timeout=self.timeout_s)

        if not (200 <= resp.status_code < 300):
            raise PingApiError(resp.status_code, resp.reason, url, resp.text.strip() or None)

        if method.upper() == "HEAD":
            return path.lstrip("/")

        body = resp.text
        if not body.startswith(CONFIRMATION_PREFIX):
            raise ValueError(f"Unexpected response body from {url}: {body!r}")
        return body[len(CONFIRMATION_PREFIX):].rstrip("\n")


def quick_smoke_test(base_url: str = "http://127.0.0.1:8080") -> None:
    """
    Simple smoke test you can run manually against a running server.

    Example:
        python -m pinghistory.client.requests
    """
    client = PingClient(base_url)

    print("GET:", client.record("smoke-test"))
    print("POST:", client.record("smoke-test/nested", method="POST"))


if __name__ == "__main__":
    quick_smoke_test()

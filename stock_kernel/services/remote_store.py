"""
JsonBinClient -- whole-document remote store over HTTP.

Responsibility:
    Speaks the three verbs of the remote store: fetch the latest snapshot,
    replace the whole snapshot, and create a new document. Authentication is
    a static secret header; there is no paging, patching or merging.

Architecture position:
    Kernel > Services -- imperative shell, the only network I/O in the
    system. Knows nothing about drugs: it moves JSON documents.

Failure modes:
    - RemoteUnavailableError: connection/timeout error or non-2xx status.
    - RemoteMalformedError: response body is not JSON or lacks the
      expected envelope (``record`` on reads, ``metadata.id`` on create).

Protocol:
    GET  {base}/b/{bin_id}/latest   X-Master-Key         -> {"record": doc, ...}
    PUT  {base}/b/{bin_id}          X-Master-Key, body   -> 2xx
    POST {base}/b                   X-Master-Key, X-Bin-Name, body
                                                         -> {"metadata": {"id": ...}}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests

from stock_kernel.exceptions import (
    PersistenceError,
    RemoteMalformedError,
    RemoteUnavailableError,
)
from stock_kernel.logging_config import get_logger

logger = get_logger("services.remote_store")

DEFAULT_BASE_URL = "https://api.jsonbin.io/v3"
DEFAULT_BIN_NAME = "CDTracker-Drugs"
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class ConnectionCheck:
    """Result of a connection test. Truthy when the store answered 2xx."""

    ok: bool
    reason: str | None = None
    status_code: int | None = None

    def __bool__(self) -> bool:
        return self.ok


class JsonBinClient:
    """HTTP client for the remote whole-document store."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        bin_name: str = DEFAULT_BIN_NAME,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.bin_name = bin_name
        self._session = session or requests.Session()

    def _headers(self, api_key: str, *, with_body: bool = False) -> dict[str, str]:
        headers = {"X-Master-Key": api_key}
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _request(self, operation: str, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            resp = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise RemoteUnavailableError(operation, str(exc)) from exc

        if not 200 <= resp.status_code < 300:
            raise RemoteUnavailableError(
                operation,
                f"HTTP {resp.status_code} {resp.reason or ''}".strip(),
                status_code=resp.status_code,
            )
        return resp

    @staticmethod
    def _json(operation: str, resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise RemoteMalformedError(operation, f"response is not JSON: {exc}") from exc

    def fetch_latest(self, bin_id: str, api_key: str) -> Any:
        """Return the latest document stored under ``bin_id``."""
        resp = self._request(
            "fetch",
            "GET",
            f"{self.base_url}/b/{bin_id}/latest",
            headers=self._headers(api_key),
        )
        body = self._json("fetch", resp)
        if not isinstance(body, dict) or "record" not in body:
            raise RemoteMalformedError("fetch", "response has no 'record' field")
        logger.debug("remote_fetched", extra={"bin_id": bin_id})
        return body["record"]

    def replace(self, bin_id: str, api_key: str, document: Any) -> None:
        """Overwrite the whole document stored under ``bin_id``."""
        self._request(
            "replace",
            "PUT",
            f"{self.base_url}/b/{bin_id}",
            headers=self._headers(api_key, with_body=True),
            json=document,
        )
        logger.debug("remote_replaced", extra={"bin_id": bin_id})

    def create(self, api_key: str, document: Any) -> str:
        """Create a new document and return its newly allocated identifier."""
        headers = self._headers(api_key, with_body=True)
        headers["X-Bin-Name"] = self.bin_name
        resp = self._request("create", "POST", f"{self.base_url}/b", headers=headers, json=document)
        body = self._json("create", resp)
        try:
            bin_id = body["metadata"]["id"]
        except (KeyError, TypeError):
            raise RemoteMalformedError("create", "response has no 'metadata.id' field") from None
        if not isinstance(bin_id, str) or not bin_id:
            raise RemoteMalformedError("create", f"invalid bin id {bin_id!r}")
        logger.info("remote_created", extra={"bin_id": bin_id})
        return bin_id

    def check(self, bin_id: str, api_key: str) -> ConnectionCheck:
        """
        Read ``bin_id`` with the given, not-yet-saved credentials.

        Never raises for store failures; the reason is returned instead.
        """
        if not bin_id or not api_key:
            return ConnectionCheck(ok=False, reason="Both an API key and a bin id are required")
        try:
            self.fetch_latest(bin_id, api_key)
        except RemoteUnavailableError as exc:
            return ConnectionCheck(ok=False, reason=exc.reason, status_code=exc.status_code)
        except PersistenceError as exc:
            return ConnectionCheck(ok=False, reason=str(exc))
        return ConnectionCheck(ok=True)

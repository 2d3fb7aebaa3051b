"""
ChaincodeClient SDK — sync client for Marbles-Engine.

Used by front ends and scripts to submit invocations and read query
results over the HTTP API.
"""

import json
import time
from typing import Any, Optional

import httpx

RETRYABLE_STATUS = {429, 502, 503, 504}


class ChaincodeClientError(Exception):
    """Raised when an invocation is rejected or the server cannot be reached."""

    def __init__(self, message: str, code: str = "CLIENT_ERROR", status_code: int = 0):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


class ChaincodeClient:
    """
    Synchronous HTTP client for Marbles-Engine.

    Only transport failures and 429/5xx gateway errors are retried; a
    rejected invocation is returned to the caller as-is.
    """

    def __init__(
        self,
        server_url: str = "http://localhost:8080",
        api_key: Optional[str] = None,
        timeout: int = 30,
        max_retries: int = 3,
        retry_backoff_base: float = 0.5,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.server_url = server_url.rstrip("/")
        self.api_key = api_key
        self.max_retries = max_retries
        self.retry_backoff_base = retry_backoff_base
        self._http = httpx.Client(
            base_url=self.server_url,
            timeout=timeout,
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        headers = {}
        if self.api_key:
            headers["X-Marbles-Api-Key"] = self.api_key
        return headers

    def _request(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        last_error = None
        for attempt in range(self.max_retries):
            try:
                resp = self._http.post(path, json=body, headers=self._headers())
            except httpx.HTTPError as e:
                last_error = str(e)
                if attempt < self.max_retries - 1:
                    time.sleep(self.retry_backoff_base * (2 ** attempt))
                    continue
                break

            if resp.status_code in RETRYABLE_STATUS and attempt < self.max_retries - 1:
                last_error = f"HTTP {resp.status_code}"
                time.sleep(self.retry_backoff_base * (2 ** attempt))
                continue

            try:
                data = resp.json()
            except json.JSONDecodeError:
                raise ChaincodeClientError(
                    "Invalid JSON response", "JSON_ERROR", resp.status_code,
                ) from None
            if resp.status_code >= 400:
                raise ChaincodeClientError(
                    data.get("error") or str(data.get("detail", "")) or f"HTTP {resp.status_code}",
                    data.get("code", "CLIENT_ERROR"),
                    resp.status_code,
                )
            return data

        raise ChaincodeClientError(
            f"All {self.max_retries} retries exhausted: {last_error}",
            "CONNECTION_ERROR",
        )

    # ── Raw calls ──

    def invoke(self, function: str, *args: str, tx_id: Optional[str] = None) -> str:
        """Submit an invocation and return its payload text."""
        body: dict[str, Any] = {"function": function, "args": list(args)}
        if tx_id:
            body["tx_id"] = tx_id
        return self._request("/invoke", body).get("payload", "")

    def query(self, function: str, *args: str) -> Any:
        """Run a read-only function and return its decoded JSON payload."""
        payload = self._request("/query", {"function": function, "args": list(args)}).get("payload", "")
        return json.loads(payload) if payload else None

    # ── Typed helpers ──

    def create_user(self, user_id: str, username: str, company: str) -> None:
        self.invoke("init_owner", user_id, username, company)

    def disable_user(self, user_id: str, company: str) -> None:
        self.invoke("disable_owner", user_id, company)

    def create_marble(
        self, marble_id: str, contact: str, balance: int, title: str,
        owner_id: str, company: str,
    ) -> dict[str, Any]:
        return json.loads(self.invoke(
            "init_marble", marble_id, contact, str(balance), title, owner_id, company,
        ))

    def delete_marble(self, marble_id: str, company: str) -> None:
        self.invoke("delete_marble", marble_id, company)

    def review(
        self, marble_id: str, user_id: str, state: str, comment: str,
        step: Optional[int] = None, next_user: str = "",
    ) -> dict[str, Any]:
        """Review the waiting stage, or ``step`` explicitly when given."""
        if step is None:
            payload = self.invoke("review_marble", marble_id, user_id, state, comment)
        else:
            payload = self.invoke(
                "tx_marble", marble_id, user_id, str(step), state, next_user, comment,
            )
        return json.loads(payload)

    def read_everything(self, company: Optional[str] = None) -> dict[str, Any]:
        if company:
            return self.query("read_everything", company)
        return self.query("read_everything")

    def history(self, marble_id: str) -> list[dict[str, Any]]:
        return self.query("getHistory", marble_id)

    # ── Lifecycle ──

    def close(self) -> None:
        """Close the HTTP client."""
        self._http.close()

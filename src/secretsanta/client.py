"""HTTP client for the SecretSanta API.

Thin synchronous wrapper used by the ``secretsanta client`` commands. Every
call asserts the acting username through the configured actor header.
"""

from typing import Any
from urllib.parse import quote

import httpx

from secretsanta.core.config import Settings, get_settings
from secretsanta.core.logging import get_logger

logger = get_logger(__name__)


class ClientError(Exception):
    """Raised when the API rejects a request or cannot be reached.

    Attributes:
        status_code: HTTP status code, or None if no response was received.
        detail: Human-readable error message.
    """

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail)


class SantaClient:
    """Client for the SecretSanta HTTP API."""

    def __init__(
        self,
        base_url: str | None = None,
        username: str | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Server URL; defaults to ``settings.api_url``.
            username: Acting username sent in the actor header.
            settings: Application settings; defaults to the cached ones.
        """
        self.settings = settings or get_settings()
        self.base_url = (base_url or self.settings.api_url).rstrip("/")
        self.username = username

    def _url(self, path: str) -> str:
        return f"{self.base_url}{self.settings.api_prefix}{path}"

    def _headers(self) -> dict[str, str]:
        if not self.username:
            return {}
        if not _header_safe(self.username):
            raise ClientError(
                f"Username '{self.username}' cannot be sent in the "
                f"{self.settings.actor_header} header"
            )
        return {self.settings.actor_header: self.username}

    def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> Any:
        url = self._url(path)
        headers = self._headers()
        logger.debug("API request", method=method, url=url)

        try:
            with httpx.Client(timeout=self.settings.client_timeout) as client:
                response = client.request(method, url, json=json, headers=headers)
        except httpx.HTTPError as e:
            raise ClientError(f"Request to {url} failed: {e}") from e

        if response.status_code >= 400:
            raise ClientError(_error_detail(response), response.status_code)
        if response.status_code == 204:
            return None
        return response.json()

    def register(self, name: str) -> dict[str, Any]:
        return self._request("POST", "/users", json={"name": name})

    def list_groups(self) -> list[dict[str, Any]]:
        return self._request("GET", "/groups")

    def create_group(self, group_name: str) -> dict[str, Any]:
        return self._request("POST", "/groups", json={"name": group_name})

    def delete_group(self, group_name: str) -> None:
        self._request("DELETE", f"/groups/{_segment(group_name)}")

    def join_group(self, group_name: str) -> dict[str, Any]:
        return self._request("POST", f"/groups/{_segment(group_name)}/members")

    def list_members(self, group_name: str) -> dict[str, Any]:
        return self._request("GET", f"/groups/{_segment(group_name)}/members")

    def add_admin(self, group_name: str, new_admin: str) -> dict[str, Any]:
        return self._request(
            "POST", f"/groups/{_segment(group_name)}/admins", json={"username": new_admin}
        )

    def revoke_admin(self, group_name: str) -> dict[str, Any]:
        return self._request("DELETE", f"/groups/{_segment(group_name)}/admins/me")

    def close_group(self, group_name: str) -> dict[str, Any]:
        return self._request("POST", f"/groups/{_segment(group_name)}/close")

    def get_recipient(self, group_name: str) -> dict[str, Any]:
        return self._request("GET", f"/groups/{_segment(group_name)}/recipient")


def _header_safe(value: str) -> bool:
    """Whether a header can carry ``value`` unchanged: printable ASCII, unpadded."""
    return value == value.strip() and all(" " <= c <= "~" for c in value)


def _segment(name: str) -> str:
    """Percent-encode a name for use as one URL path segment."""
    return quote(name, safe="")


def _error_detail(response: httpx.Response) -> str:
    """Extract the error message from an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"

    detail = body.get("detail") if isinstance(body, dict) else None
    if detail is None:
        return f"HTTP {response.status_code}"
    if isinstance(detail, str):
        return detail
    # FastAPI validation errors carry a list of error objects
    return "; ".join(str(item.get("msg", item)) if isinstance(item, dict) else str(item) for item in detail)

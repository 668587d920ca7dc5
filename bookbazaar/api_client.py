"""
HTTP client for the BookBazaar REST API.

All requests are JSON over HTTP. Authenticated calls send
``Authorization: Bearer <token>``; key-based reads send ``X-API-Key``.
Any non-2xx response is a failure regardless of body content.
"""
from typing import Any, Optional

import httpx

from bookbazaar.config import Settings
from bookbazaar.errors import ApiError, NetworkError
from bookbazaar.logging import get_logger

logger = get_logger(__name__)

API_KEY_HEADER = "X-API-Key"


def bearer_headers(token: Optional[str]) -> dict[str, str]:
    """Authorization header for a session token (empty when there is none)."""
    return {"Authorization": f"Bearer {token}"} if token else {}


def api_key_headers(api_key: Optional[str]) -> dict[str, str]:
    """Key-based access header (empty when there is no key)."""
    return {API_KEY_HEADER: api_key} if api_key else {}


def _error_message(response: httpx.Response) -> Optional[str]:
    """Extract the ``message`` field from an error body, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return None


class ApiClient:
    """Thin async wrapper over a shared ``httpx.AsyncClient``.

    No retries and no request queueing: each call is one request.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of shared httpx client with timeouts."""
        if self._http_client is None:
            timeout = self.settings.http_timeout
            self._http_client = httpx.AsyncClient(
                base_url=self.settings.api_url,
                timeout=httpx.Timeout(timeout, connect=min(timeout, 5.0)),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
                transport=self._transport,
            )
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def request(
        self,
        method: str,
        path: str,
        *,
        token: Optional[str] = None,
        api_key: Optional[str] = None,
        json: Any = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Perform a request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path relative to the API base URL
            token: Session token for bearer auth
            api_key: API key sent as ``X-API-Key``
            json: Request body
            params: Query parameters

        Returns:
            Parsed JSON body, or None for an empty body

        Raises:
            ApiError: Non-2xx response
            NetworkError: No response was obtained
        """
        headers = {**api_key_headers(api_key), **bearer_headers(token)}
        client = await self._get_http_client()

        try:
            response = await client.request(method, path, headers=headers, json=json, params=params)
        except httpx.RequestError as e:
            logger.warning("Network error on %s %s: %s", method, path, e)
            raise NetworkError(str(e)) from e

        if not response.is_success:
            message = _error_message(response)
            logger.info("%s %s rejected with %s: %r", method, path, response.status_code, message)
            raise ApiError(response.status_code, message)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.warning("Non-JSON body from %s %s", method, path)
            raise ApiError(response.status_code, "Invalid response body") from e

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)

"""
SoloDesk API client.

WHAT: Async HTTP client for the SoloDesk REST API, used by the template
editor and intake forms.

WHY: Centralizes:
- Bearer authentication
- Timeout handling
- Error wrapping in ApiRequestError with the response status kept
- {success, message, data} envelope parsing

HOW: Uses one httpx.AsyncClient per instance. The transport is injectable
so tests can use httpx.MockTransport or ASGITransport.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from solodesk.core.config import settings
from solodesk.core.exceptions import ApiRequestError


logger = logging.getLogger(__name__)


class SoloDeskApiClient:
    """
    Async client for the SoloDesk API.

    Example:
        async with SoloDeskApiClient(token=token) as api:
            profile = await api.get_profile()
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize API client.

        Args:
            base_url: API origin (defaults to API_BASE_URL)
            token: Bearer token
            timeout: Request timeout in seconds (defaults to HTTP_TIMEOUT_SECONDS)
            transport: Custom httpx transport (tests)
        """
        self._base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self._token = token
        self._timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=transport,
            follow_redirects=False,
        )

    async def __aenter__(self) -> "SoloDeskApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _get_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _send(
        self,
        method: str,
        endpoint: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Make an authenticated request.

        Raises:
            ApiRequestError: On non-2xx status (response_status in context)
                or transport failure (no response_status)
        """
        try:
            response = await self._client.request(
                method,
                endpoint,
                headers=self._get_headers(),
                **kwargs,
            )
        except httpx.TimeoutException as e:
            raise ApiRequestError(
                message="SoloDesk API request timed out",
                endpoint=endpoint,
                method=method,
                error=str(e),
            )
        except httpx.RequestError as e:
            raise ApiRequestError(
                message=f"SoloDesk API connection error: {e}",
                endpoint=endpoint,
                method=method,
            )

        if response.status_code >= 400:
            raise ApiRequestError(
                message=self._parse_error_response(response),
                endpoint=endpoint,
                method=method,
                response_status=response.status_code,
            )
        return response

    async def _request(
        self,
        method: str,
        endpoint: str,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """Make a request and return the parsed JSON body."""
        response = await self._send(method, endpoint, **kwargs)
        if response.status_code == 204 or not response.content:
            return {}
        try:
            body = response.json()
        except ValueError:
            raise ApiRequestError(
                message="SoloDesk API returned an invalid response",
                endpoint=endpoint,
                method=method,
                response_status=response.status_code,
            )
        if not isinstance(body, dict):
            raise ApiRequestError(
                message="SoloDesk API returned an unexpected response",
                endpoint=endpoint,
                method=method,
                response_status=response.status_code,
            )
        return body

    def _parse_error_response(self, response: httpx.Response) -> str:
        """Error message from an error body, or the status line."""
        try:
            data = response.json()
            if isinstance(data, dict):
                if data.get("message"):
                    return str(data["message"])
                if data.get("error"):
                    return str(data["error"])
            return str(data)
        except ValueError:
            return response.text or f"HTTP {response.status_code}"

    @staticmethod
    def _data(body: Dict[str, Any], endpoint: str) -> Any:
        """
        Unwrap the {success, data} envelope.

        Raises:
            ApiRequestError: If success is false
        """
        if body.get("success") is False:
            raise ApiRequestError(
                message=body.get("message") or "SoloDesk API reported a failure",
                endpoint=endpoint,
            )
        return body.get("data")

    # =========================================================================
    # Profile
    # =========================================================================

    async def get_profile(self) -> Dict[str, Any]:
        endpoint = "/api/users/email-template-data"
        return self._data(await self._request("GET", endpoint), endpoint)

    # =========================================================================
    # Email templates
    # =========================================================================

    async def list_templates(self, template_type: Optional[str] = None) -> List[Dict[str, Any]]:
        endpoint = "/api/email-templates"
        params = {"type": template_type} if template_type else None
        return self._data(await self._request("GET", endpoint, params=params), endpoint) or []

    async def create_template(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST a template; returns the raw envelope so callers see success/message."""
        return await self._request("POST", "/api/email-templates", json=payload)

    async def update_template(self, template_id: Any, payload: Dict[str, Any]) -> Dict[str, Any]:
        """PUT a template; returns the raw envelope."""
        return await self._request("PUT", f"/api/email-templates/{template_id}", json=payload)

    async def preview_template(self, template_type: str, state: Dict[str, Any]) -> str:
        """Server-rendered preview HTML."""
        response = await self._send(
            "POST",
            "/api/email-templates/preview",
            json={"type": template_type, "state": state},
        )
        return response.text

    # =========================================================================
    # Invoices
    # =========================================================================

    async def list_invoices(self) -> List[Dict[str, Any]]:
        endpoint = "/api/invoices"
        return self._data(await self._request("GET", endpoint), endpoint) or []

    # =========================================================================
    # Intake
    # =========================================================================

    async def upload_file(self, filename: str, content: bytes, mime_type: str) -> Dict[str, Any]:
        """Upload one attachment; returns its metadata."""
        endpoint = "/api/files/upload"
        body = await self._request(
            "POST",
            endpoint,
            files={"file": (filename, content, mime_type)},
        )
        return self._data(body, endpoint)

    async def create_client(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        endpoint = "/api/clients"
        return self._data(await self._request("POST", endpoint, json=payload), endpoint)

    async def create_project(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        endpoint = "/api/projects"
        return self._data(await self._request("POST", endpoint, json=payload), endpoint)

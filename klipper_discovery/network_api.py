from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, List, Optional

import aiohttp

from .const import NETWORK_API_BASE_URL
from .exceptions import NetworkAPIError
from .models import (
    APIResponse,
    HTTPValidationError,
    NetworkScanResult,
    NetworkStatus,
    WiFiConnectionRequest,
    WiFiConnectionResult,
    WiFiNetwork,
)

_LOGGER = logging.getLogger(__name__)


class NetworkAPI:
    """Client for the printer's wifi configuration service (http://<host>:8000).

    Independent of KlipperWS; the two share no state.
    """

    def __init__(
        self,
        base_url: str = NETWORK_API_BASE_URL,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = 10,
    ):
        self._base_url = base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "NetworkAPI":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ---------- Endpoints ----------

    async def get_network_status(self) -> NetworkStatus:
        return await self._request("/api/wifi/status")

    async def scan_networks(self) -> NetworkScanResult:
        # the service has no scan endpoint; listing networks triggers a scan
        networks = await self._request("/api/wifi/networks")
        return {"networks": networks}

    async def get_available_networks(self) -> List[WiFiNetwork]:
        return await self._request("/api/wifi/networks")

    async def connect_to_network(self, request: WiFiConnectionRequest) -> WiFiConnectionResult:
        return await self._request("/api/wifi/connect", method="POST", payload=request)

    async def disconnect_network(self) -> APIResponse:
        return await self._request("/api/wifi/disconnect", method="POST")

    # ---------- Internal ----------

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def _request(self, endpoint: str, method: str = "GET", payload: Any = None) -> Any:
        url = f"{self._base_url}{endpoint}"
        _LOGGER.debug("%s %s", method, url)
        session = self._get_session()
        try:
            async with session.request(
                method,
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            ) as r:
                _LOGGER.debug("Response status: %s for %s", r.status, url)
                if r.status >= 400:
                    raise await self._error_from(r)
                data = await r.json(content_type=None)
                _LOGGER.debug("Response data for %s: %s", url, data)
                return data
        except NetworkAPIError:
            raise
        except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
            _LOGGER.warning("Network service unreachable at %s: %s", url, e)
            raise NetworkAPIError(
                "Failed to connect to the network service. Please check if the service is running."
            ) from e
        except Exception as e:
            raise NetworkAPIError(f"Network request failed: {e}") from e

    @staticmethod
    async def _error_from(r: aiohttp.ClientResponse) -> NetworkAPIError:
        reason = r.reason or ""
        try:
            body: HTTPValidationError = await r.json(content_type=None)
        except (aiohttp.ContentTypeError, json.JSONDecodeError):
            body = {"detail": [{"loc": [], "msg": reason, "type": "error"}]}
        return NetworkAPIError(
            _first_detail_msg(body) or f"HTTP {r.status} - {reason}",
            status=r.status,
            response=body,
        )


def _first_detail_msg(body: Any) -> Optional[str]:
    """detail[0].msg of a validation error body, if the body has that shape."""
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, list) and detail and isinstance(detail[0], dict):
        msg = detail[0].get("msg")
        if isinstance(msg, str):
            return msg
    return None

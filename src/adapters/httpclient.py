"""
Thin aiohttp client for the *arr v3 REST API.

Every request carries the instance API key; network failures become
ArrConnectionError and non-2xx answers become ArrAPIError.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from adapters.errors import ArrAPIError, ArrConnectionError
from ir.types import ConnectionIR

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "nebularr"
DEFAULT_TIMEOUT = 30


class ArrClient:
    """
    One client per backend instance and reconciliation pass.

    Usage:
        async with ArrClient(conn) as client:
            status = await client.get("/api/v3/system/status")
    """

    def __init__(
        self,
        conn: ConnectionIR,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.base_url = conn.url.rstrip("/")
        self._api_key = conn.api_key
        self._verify_ssl = not conn.insecure_skip_verify
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._user_agent = user_agent
        self._session: Optional[aiohttp.ClientSession] = None

    def _get_headers(self) -> Dict[str, str]:
        return {
            "X-Api-Key": self._api_key,
            "Accept": "application/json",
            "User-Agent": self._user_agent,
        }

    async def __aenter__(self) -> "ArrClient":
        self._session = aiohttp.ClientSession(
            headers=self._get_headers(),
            timeout=self._timeout,
            connector=aiohttp.TCPConnector(ssl=None if self._verify_ssl else False),
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Send one request and decode the JSON answer.

        Returns:
            Decoded JSON, or None for empty bodies

        Raises:
            ArrConnectionError: If the instance cannot be reached
            ArrAPIError: If the instance answers with a non-2xx status
        """
        if self._session is None:
            raise RuntimeError("ArrClient used outside of 'async with'")

        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url}")
        try:
            async with self._session.request(method, url, json=json, params=params) as response:
                body = await response.text()
                if response.status >= 400:
                    raise ArrAPIError(method, path, response.status, body)
                if not body:
                    return None
                return await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise ArrConnectionError(self.base_url, str(e)) from e
        except asyncio.TimeoutError as e:
            raise ArrConnectionError(self.base_url, "request timed out") from e

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

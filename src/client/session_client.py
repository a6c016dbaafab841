"""
Session Client

httpx client for the session API. Tokens travel in the client's cookie
jar; any 401 other than from the refresh endpoint itself goes through one
shared RefreshSingleFlight and the request is replayed with the new cookies.
"""

import logging
from typing import Callable, Optional

import httpx

from .refresh_single_flight import ReauthenticationRequired, RefreshSingleFlight

logger = logging.getLogger(__name__)


class SessionClient:
    def __init__(
        self,
        base_url: str,
        refresh_path: str = "/auth/refresh",
        wait_timeout: Optional[float] = None,
        on_reauthenticate: Optional[Callable[[BaseException], None]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.refresh_path = refresh_path
        self._client = httpx.AsyncClient(
            base_url=base_url,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )
        self.single_flight = RefreshSingleFlight(
            self._refresh,
            wait_timeout=wait_timeout,
            on_reauthenticate=on_reauthenticate,
        )

    @classmethod
    def from_config(cls, config, **kwargs) -> "SessionClient":
        return cls(
            config.BACKEND_URL,
            wait_timeout=config.REFRESH_WAIT_TIMEOUT_SECONDS,
            **kwargs,
        )

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    async def __aenter__(self) -> "SessionClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """
        Send a request, refreshing the session once on 401.

        Raises:
            ReauthenticationRequired: the session could not be refreshed
        """
        request = self._client.build_request(method, url, **kwargs)
        response = await self._client.send(request)

        if response.status_code != httpx.codes.UNAUTHORIZED or self._is_refresh(request):
            return response

        await response.aclose()
        return await self.single_flight.on_unauthorized(request, self._replay, response)

    async def get(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def patch(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)

    async def _refresh(self) -> None:
        response = await self._client.post(self.refresh_path)
        if response.is_error:
            logger.warning(f"Refresh rejected with {response.status_code}")
            self._client.cookies.clear()
            raise ReauthenticationRequired(f"Refresh rejected with {response.status_code}")

    async def _replay(self, request: httpx.Request) -> httpx.Response:
        # The original Cookie header carries the rejected access token
        request.headers.pop("Cookie", None)
        self._client.cookies.set_cookie_header(request)
        return await self._client.send(request)

    def _is_refresh(self, request: httpx.Request) -> bool:
        return request.url.path == self.refresh_path

"""
API Gateway Client

Thin request/response layer every other component goes through:
- Joins paths onto config.API_BASE_URL
- Injects the bearer token from the SessionContext
- Turns a 401 into a session-wide logout (SessionContext.expire)
- Unwraps JSON error bodies ({"error": "..."}) into ApiException
"""

import asyncio
import json
import logging
from typing import Any

import aiohttp

import config
from exceptions.api import ApiException, ApiConnectionException, UnauthorizedException
from services.session import SessionContext

logger = logging.getLogger(__name__)


class ApiClient:

    def __init__(
        self,
        session: SessionContext,
        base_url: str | None = None,
        http: aiohttp.ClientSession | None = None,
        timeout: float | None = None
    ):
        """
        Args:
            session: Session context supplying the bearer token
            base_url: API root, defaults to config.API_BASE_URL
            http: Shared aiohttp session (created lazily when omitted)
            timeout: Total request timeout in seconds
        """
        self.session = session
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self._http = http
        self._owns_http = http is None
        self._timeout = aiohttp.ClientTimeout(total=timeout or config.HTTP_TIMEOUT_SECONDS)

    @property
    def http(self) -> aiohttp.ClientSession:
        if self._http is None or self._http.closed:
            self._http = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_http = True
        return self._http

    async def close(self):
        if self._owns_http and self._http is not None and not self._http.closed:
            await self._http.close()

    def _headers(self, has_body: bool) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if has_body:
            headers["Content-Type"] = "application/json"
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Any:
        """
        Perform one API call and return the decoded JSON body (None when empty).

        Raises:
            UnauthorizedException: On 401, after the session has been expired
            ApiException: On any other non-2xx status
            ApiConnectionException: When the API could not be reached
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug(f"[API] {method} {url} params={params}")
        try:
            async with self.http.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=self._headers(json_body is not None),
                timeout=self._timeout
            ) as response:
                body = await response.text()
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"[API] {method} {path} failed: {type(e).__name__}: {e}")
            raise ApiConnectionException(path, type(e).__name__) from e

        if status == 401:
            logger.warning(f"[API] 401 on {method} {path} - ending session")
            await self.session.expire()
            raise UnauthorizedException(path)

        if status >= 400:
            raise ApiException(self._error_message(body), status, path)

        if not body.strip():
            return None
        try:
            return json.loads(body)
        except ValueError as e:
            raise ApiException(f"Invalid JSON from API: {e}", status, path) from e

    @staticmethod
    def _error_message(body: str) -> str:
        try:
            payload = json.loads(body)
        except ValueError:
            return body or "An error occurred"
        if isinstance(payload, dict):
            return payload.get("error") or "An error occurred"
        return body or "An error occurred"

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json_body: Any | None = None) -> Any:
        return await self.request("POST", path, json_body=json_body)

    async def put(self, path: str, json_body: Any | None = None) -> Any:
        return await self.request("PUT", path, json_body=json_body)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

"""
Low-level HTTP transport for the WebUI API.

Wraps an httpx.AsyncClient and turns every failure into a RequestError:
non-2xx responses (with the body text attached), transport errors, and
calls that outlive the configured timeout.
"""

import asyncio
from typing import Any, Mapping, Optional

import httpx

from .config import ClientConfig
from .exceptions import RequestError
from .logger import logger


class HttpTransport:
    def __init__(self, config: ClientConfig):
        self.config = config
        self._owns_client = config.http_client is None
        if config.http_client is not None:
            self.client = config.http_client
        else:
            self.client = httpx.AsyncClient(
                transport=config.transport,
                timeout=None,
                follow_redirects=False,
            )

    async def fetch(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, str]] = None,
        data: Optional[Mapping[str, Any]] = None,
        files: Optional[Any] = None,
        follow_redirects: bool = True,
    ) -> httpx.Response:
        """
        Send a single request and return the (fully read) response.

        If the config has a positive timeout, the whole exchange is bounded
        by it and cancelled when it elapses.

        Raises:
            RequestError: On timeout, transport failure or a non-2xx status
        """
        timeout = self.config.timeout
        try:
            request = self.client.build_request(
                method,
                url,
                headers=dict(headers or {}),
                params=params,
                data=data,
                files=files,
            )
            if timeout and timeout > 0:
                response = await asyncio.wait_for(self._send(request, follow_redirects), timeout)
            else:
                response = await self._send(request, follow_redirects)
        except asyncio.TimeoutError as e:
            logger.debug(f"{method} {url} aborted after {timeout}s")
            raise RequestError(
                f"Request aborted: no response from {url} within {timeout}s",
                timed_out=True,
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise RequestError(f"Request failed: {e}") from e

        # With redirects disabled a 3xx is the answer itself (login sets SID on it)
        if not response.is_success and not (response.is_redirect and not follow_redirects):
            raise RequestError.from_status(response.status_code, response.reason_phrase, response.text)

        return response

    async def _send(self, request: httpx.Request, follow_redirects: bool) -> httpx.Response:
        return await self.client.send(request, follow_redirects=follow_redirects)

    async def aclose(self) -> None:
        """Close the underlying httpx client unless it was supplied by the caller."""
        if self._owns_client:
            await self.client.aclose()


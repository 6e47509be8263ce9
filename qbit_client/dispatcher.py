"""
Authenticated request path shared by every endpoint method.

Before each call the dispatcher checks the session: a missing or expired SID
triggers a login first, and if that fails the original request is never
sent. Responses are decoded as JSON or plain text, as chosen by the caller,
because the WebUI mixes both encodings.
"""

from typing import Any, Mapping, Optional

from .auth import Authenticator
from .config import ClientConfig
from .exceptions import AuthenticationError, QBittorrentError, RequestError
from .logger import logger
from .session import SessionState
from .transport import HttpTransport
from .utils import join_url, to_query_params


class RequestDispatcher:
    def __init__(
        self,
        config: ClientConfig,
        state: SessionState,
        authenticator: Authenticator,
        transport: HttpTransport,
    ):
        self.config = config
        self.state = state
        self.authenticator = authenticator
        self.transport = transport

    async def ensure_session(self) -> None:
        """Log in if there is no valid SID."""
        if self.state.is_authenticated():
            return

        try:
            authed = await self.authenticator.login()
        except QBittorrentError as e:
            raise AuthenticationError(f"Auth failed: {e}") from e
        if not authed:
            raise AuthenticationError("Auth failed")

    async def request(
        self,
        path: str,
        method: str = "GET",
        params: Optional[Mapping[str, Any]] = None,
        data: Optional[Mapping[str, Any]] = None,
        files: Optional[Any] = None,
        headers: Optional[Mapping[str, str]] = None,
        parse_json: bool = True,
    ) -> Any:
        """
        Execute an authenticated WebUI request.

        Args:
            path: API path relative to the configured base URL
            method: HTTP method
            params: Query string parameters
            data: Form fields (url-encoded, or multipart when files is given)
            files: Multipart parts (mapping or list of (name, part) pairs)
            headers: Extra headers sent alongside the SID cookie
            parse_json: Decode the body as JSON; otherwise return it as text

        Raises:
            AuthenticationError: If no session could be established
            RequestError: On a non-2xx status, transport failure or timeout
        """
        await self.ensure_session()

        url = join_url(self.config.base_url, path)
        request_headers = {**(headers or {}), **self.authenticator.credential_headers(self.state.sid)}

        logger.debug(f"{method} {path}")
        response = await self.transport.fetch(
            url,
            method=method,
            headers=request_headers,
            params=to_query_params(params) if params else None,
            data=to_query_params(data) if data else None,
            files=files,
        )

        if parse_json:
            try:
                return response.json()
            except ValueError as e:
                raise RequestError(f"Invalid JSON response from {path}: {e}", body=response.text) from e
        return response.text

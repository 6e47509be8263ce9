"""
WebUI login/logout handshake.

qBittorrent answers POST /auth/login with a SID cookie. The cookie is read
from the login response itself (redirects are not followed), its expiry is
derived from Expires, then Max-Age, then a one hour default. After a
successful login the server version is detected once and cached so
version-dependent endpoints can pick the right wire format.
"""

from typing import List

import httpx

from .config import ClientConfig
from .exceptions import AuthenticationError, QBittorrentError
from .logger import logger
from .session import (
    SID_COOKIE_NAME,
    AuthState,
    SessionState,
    classify_version,
    compute_expiry,
    parse_set_cookie,
)
from .transport import HttpTransport
from .utils import join_url


class Authenticator:
    def __init__(self, config: ClientConfig, state: SessionState, transport: HttpTransport):
        self.config = config
        self.state = state
        self.transport = transport

    async def login(self) -> bool:
        """
        Log in and store the SID with its expiry.

        Returns:
            True once the session is established

        Raises:
            AuthenticationError: If the response carries no usable SID cookie
            RequestError: If the login request itself fails
        """
        url = join_url(self.config.base_url, "/auth/login")
        response = await self.transport.fetch(
            url,
            method="POST",
            data={
                "username": self.config.username or "",
                "password": self.config.password or "",
            },
            follow_redirects=False,
        )

        directives = self._set_cookie_directives(response)
        directive = next((d for d in directives if f"{SID_COOKIE_NAME}=" in d), None)
        if directive is None and directives:
            directive = directives[0]
        if directive is None:
            raise AuthenticationError("Credential cookie not found. Auth failed.")

        cookie = parse_set_cookie(directive)
        sid = cookie.get(SID_COOKIE_NAME)
        if not sid:
            raise AuthenticationError(f"Invalid cookie: {directive}")

        self.state.auth = AuthState(sid=sid, expires=compute_expiry(cookie))
        logger.info(f"Logged in to qBittorrent at {self.config.base_url}, session valid until {self.state.auth.expires}")

        await self.detect_version()
        return True

    async def logout(self) -> bool:
        """
        Log out remotely (best effort) and always drop the local session.

        A failing remote call is logged and ignored: local auth and version
        state are cleared either way.
        """
        sid = self.state.sid
        try:
            if sid:
                url = join_url(self.config.base_url, "/auth/logout")
                await self.transport.fetch(url, method="POST", headers=self.credential_headers(sid))
        except QBittorrentError as e:
            logger.warning(f"Remote logout failed, clearing local session anyway: {e}")
        finally:
            self.state.clear()

        logger.info("Logged out of qBittorrent")
        return True

    async def detect_version(self) -> None:
        """
        Fetch /app/version once per session and cache its classification.

        A failure leaves the version unknown, which keeps every
        version-dependent endpoint on the pre-5.0 wire format.
        """
        if self.state.version is not None:
            return

        url = join_url(self.config.base_url, "/app/version")
        try:
            response = await self.transport.fetch(url, headers=self.credential_headers(self.state.sid))
        except QBittorrentError as e:
            logger.warning(f"Could not detect qBittorrent version, assuming pre-5.0 API: {e}")
            return

        self.state.version = classify_version(response.text)
        logger.debug(
            f"qBittorrent version {self.state.version.application} "
            f"(v5+: {self.state.version.is_v5_or_higher})"
        )

    @staticmethod
    def credential_headers(sid: str) -> dict:
        return {"Cookie": f"{SID_COOKIE_NAME}={sid or ''}"}

    @staticmethod
    def _set_cookie_directives(response: httpx.Response) -> List[str]:
        return [value for value in response.headers.get_list("set-cookie") if value]

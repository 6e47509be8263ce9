"""
Exceptions raised by the qBittorrent client.

- QBittorrentError: Base exception for everything raised by this package
- AuthenticationError: Login handshake failed or no session could be established
- RequestError: Non-2xx response, transport failure or timeout
- TorrentAddError: The server rejected a torrent or magnet ("Fails.")
"""

from typing import Optional


class QBittorrentError(Exception):
    """Base exception for qBittorrent client errors."""
    pass


class AuthenticationError(QBittorrentError):
    """Raised when the WebUI login fails or a session cannot be established."""
    pass


class RequestError(QBittorrentError):
    """Raised when a WebUI request fails at the HTTP or transport level."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        reason: str = "",
        body: str = "",
        timed_out: bool = False,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason
        self.body = body
        self.timed_out = timed_out

    @classmethod
    def from_status(cls, status_code: int, reason: str, body: str) -> "RequestError":
        message = f"Request failed: {status_code} {reason} {body}".strip()
        return cls(message, status_code=status_code, reason=reason, body=body)


class TorrentAddError(RequestError):
    """Raised when qBittorrent answers an add request with 'Fails.'."""
    pass

"""
qbit-client - Async client and MCP bridge for the qBittorrent WebUI API.

Handles SID cookie sessions, picks the right endpoint names for qBittorrent
4.x and 5.x, and keeps a local cache of the server logs for diagnostics.
"""

from .client import QBittorrentClient
from .config import ClientConfig, Config
from .exceptions import AuthenticationError, QBittorrentError, RequestError, TorrentAddError
from .log_persister import LogPersister
from .models import (
    AddTorrentOptions,
    FilePriority,
    LogEntry,
    LogOptions,
    LogType,
    PeerLogEntry,
    ShareLimits,
    TorrentListOptions,
)

__version__ = "0.1.0"
__all__ = [
    "QBittorrentClient",
    "ClientConfig",
    "Config",
    "LogPersister",
    "QBittorrentError",
    "AuthenticationError",
    "RequestError",
    "TorrentAddError",
    "AddTorrentOptions",
    "FilePriority",
    "LogEntry",
    "LogOptions",
    "LogType",
    "PeerLogEntry",
    "ShareLimits",
    "TorrentListOptions",
]

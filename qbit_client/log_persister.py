"""
In-memory cache of the qBittorrent main and peer logs.

Both logs are append-only on the server and every entry has a monotonic id,
so a sync only asks for entries newer than the last cached id and appends
them. Concurrent callers share one in-flight sync per log.
"""

import asyncio
from typing import Awaitable, Callable, Generic, List, Optional, Protocol, TypeVar

from .config import Config
from .logger import logger
from .models import LogEntry, LogOptions, PeerLogEntry


class LogSource(Protocol):
    """Anything that can page through the two WebUI logs (usually QBittorrentClient)."""

    async def get_log(self, options: Optional[LogOptions] = None) -> List[LogEntry]:
        ...

    async def get_peer_log(self, last_known_id: Optional[int] = None) -> List[PeerLogEntry]:
        ...


EntryT = TypeVar("EntryT", LogEntry, PeerLogEntry)


class _LogStream(Generic[EntryT]):
    def __init__(self, name: str, fetch_page: Callable[[Optional[int]], Awaitable[List[EntryT]]], max_pages: int):
        self.name = name
        self.fetch_page = fetch_page
        self.max_pages = max_pages
        self.entries: List[EntryT] = []
        self._inflight: Optional[asyncio.Task] = None

    async def sync(self) -> List[EntryT]:
        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._drain())
        # A cancelled caller must not cancel the sync other callers are waiting on
        return await asyncio.shield(self._inflight)

    async def _drain(self) -> List[EntryT]:
        try:
            pages = 0
            while pages < self.max_pages:
                last_known_id = self.entries[-1].id if self.entries else None
                page = await self.fetch_page(last_known_id)
                if not page:
                    break
                self.entries = sorted([*self.entries, *page], key=lambda entry: entry.id)
                pages += 1
            else:
                logger.debug(f"{self.name} log sync stopped after {self.max_pages} pages")
        finally:
            self._inflight = None
        return list(self.entries)

    def clear(self) -> None:
        self.entries = []


class LogPersister:
    def __init__(self, source: LogSource, max_pages: int = Config.LOG_SYNC_MAX_PAGES):
        self.source = source
        self._main = _LogStream("main", self._fetch_main_page, max_pages)
        self._peer = _LogStream("peer", source.get_peer_log, max_pages)

    async def _fetch_main_page(self, last_known_id: Optional[int]) -> List[LogEntry]:
        return await self.source.get_log(LogOptions(last_known_id=last_known_id))

    async def sync_main(self) -> List[LogEntry]:
        """Pull new main log entries; joins an already running sync if there is one."""
        return await self._main.sync()

    async def sync_peer(self) -> List[PeerLogEntry]:
        """Pull new peer log entries; joins an already running sync if there is one."""
        return await self._peer.sync()

    async def get_main_logs(self, options: Optional[LogOptions] = None) -> List[LogEntry]:
        """
        Sync, then return cached main log entries in ascending id order.

        Args:
            options: Optional cursor (ids strictly greater than last_known_id)
                and per-severity flags; unset flags include that severity.
                The cache itself is never filtered.

        Raises:
            QBittorrentError: If the sync fails
        """
        entries = await self.sync_main()
        options = options or LogOptions()
        return [entry for entry in entries if options.includes(entry)]

    async def get_peer_logs(self) -> List[PeerLogEntry]:
        return await self.sync_peer()

    def clear(self) -> None:
        """Drop both caches. A sync already in flight may still repopulate them."""
        self._main.clear()
        self._peer.clear()

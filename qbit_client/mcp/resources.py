"""
MCP resources under qbittorrent://.

Resources always return a JSON document. When the underlying call fails the
document is the error payload instead of the data.
"""

import asyncio
from typing import Any, Awaitable, Callable
from urllib.parse import unquote

from mcp.server.fastmcp import FastMCP

from ..client import QBittorrentClient
from ..log_persister import LogPersister
from ..models import TorrentListOptions
from .envelope import JSON_MIME_TYPE, run_with_error_payload, to_json_resource


async def read_resource(persister: LogPersister, handler: Callable[[], Awaitable[Any]]) -> str:
    execution = await run_with_error_payload(persister, handler)
    return to_json_resource(execution.data if execution.ok else execution.error)


def register_resources(mcp: FastMCP, client: QBittorrentClient, persister: LogPersister) -> None:
    """Register the torrent, category and tag resources with the MCP server."""

    async def read(handler: Callable[[], Awaitable[Any]]) -> str:
        return await read_resource(persister, handler)

    @mcp.resource("qbittorrent://torrents", name="qbittorrent.torrents", mime_type=JSON_MIME_TYPE)
    async def torrents() -> str:
        """All torrents."""
        return await read(client.get_torrent_list)

    @mcp.resource("qbittorrent://torrents/{hash}", name="qbittorrent.torrent", mime_type=JSON_MIME_TYPE)
    async def torrent(hash: str) -> str:
        """One torrent with its properties, trackers and files."""
        async def details():
            listing, properties, trackers, files = await asyncio.gather(
                client.get_torrent_list(TorrentListOptions(hashes=hash)),
                client.get_torrent_generic_properties(hash),
                client.get_torrent_trackers(hash),
                client.get_torrent_contents(hash),
            )
            return {
                "hash": hash,
                "torrent": listing[0] if listing else None,
                "properties": properties,
                "trackers": trackers,
                "files": files,
            }
        return await read(details)

    @mcp.resource("qbittorrent://categories", name="qbittorrent.categories", mime_type=JSON_MIME_TYPE)
    async def categories() -> str:
        """All categories."""
        return await read(client.get_all_categories)

    @mcp.resource("qbittorrent://categories/{name}", name="qbittorrent.category", mime_type=JSON_MIME_TYPE)
    async def category(name: str) -> str:
        """One category and the torrents assigned to it."""
        name = unquote(name)

        async def details():
            all_categories, torrents_in_category = await asyncio.gather(
                client.get_all_categories(),
                client.get_torrent_list(TorrentListOptions(category=name)),
            )
            return {
                "name": name,
                "category": all_categories.get(name),
                "torrents": torrents_in_category,
            }
        return await read(details)

    @mcp.resource("qbittorrent://tags", name="qbittorrent.tags", mime_type=JSON_MIME_TYPE)
    async def tags() -> str:
        """All tags."""
        return await read(client.get_all_tags)

    @mcp.resource("qbittorrent://tags/{name}", name="qbittorrent.tag", mime_type=JSON_MIME_TYPE)
    async def tag(name: str) -> str:
        """Torrents carrying one tag."""
        name = unquote(name)

        async def details():
            all_tags, tagged = await asyncio.gather(
                client.get_all_tags(),
                client.get_torrent_list(TorrentListOptions(tag=name)),
            )
            return {"name": name, "exists": name in all_tags, "torrents": tagged}
        return await read(details)

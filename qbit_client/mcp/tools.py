"""
MCP tools: one tool per client endpoint method, with the same snake_case name.

Tool descriptions start with "Read-only." or "Mutating." so the model can
tell queries from state changes. Results are returned as text; failures are
raised as ToolError carrying the JSON error payload (message plus recent
qBittorrent log entries).
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from ..client import QBittorrentClient
from ..log_persister import LogPersister
from ..models import FilePriority
from .envelope import format_result_text, run_with_error_payload, to_json_resource
from .schemas import (
    AddTorrentArgs,
    Hashes,
    LogArgs,
    ShareLimitsArgs,
    TorrentListArgs,
    decode_torrent,
)

StrOrList = Union[str, List[str]]


async def run_tool(persister: LogPersister, handler: Callable[[], Awaitable[Any]]) -> str:
    """Run a tool body through the error envelope and render the result as text."""
    execution = await run_with_error_payload(persister, handler)
    if not execution.ok:
        raise ToolError(to_json_resource(execution.error))
    return format_result_text(execution.data)


def register_tools(mcp: FastMCP, client: QBittorrentClient, persister: LogPersister) -> None:
    """Register every qBittorrent tool with the MCP server."""

    async def run(handler: Callable[[], Awaitable[Any]]) -> str:
        return await run_tool(persister, handler)

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------

    @mcp.tool()
    async def get_application_version() -> str:
        """Read-only. Get the qBittorrent application version string."""
        return await run(client.get_application_version)

    @mcp.tool()
    async def get_api_version() -> str:
        """Read-only. Get the qBittorrent WebUI API version."""
        return await run(client.get_api_version)

    @mcp.tool()
    async def get_build_info() -> str:
        """Read-only. Get build info (Qt, libtorrent, Boost, OpenSSL, bitness)."""
        return await run(client.get_build_info)

    @mcp.tool()
    async def get_application_preferences() -> str:
        """Read-only. Get the full qBittorrent preferences object."""
        return await run(client.get_application_preferences)

    @mcp.tool()
    async def set_application_preferences(preferences: Dict[str, Any]) -> str:
        """Mutating. Update preferences; only the given keys change."""
        return await run(lambda: client.set_application_preferences(preferences))

    @mcp.tool()
    async def get_default_save_path() -> str:
        """Read-only. Get the default save path."""
        return await run(client.get_default_save_path)

    @mcp.tool()
    async def get_cookies() -> str:
        """Read-only. Get the cookies qBittorrent sends when downloading torrents from URLs."""
        return await run(client.get_cookies)

    @mcp.tool()
    async def set_cookies(cookies: List[Dict[str, Any]]) -> str:
        """Mutating. Replace the cookies used for URL downloads (name, domain, path, value, expirationDate)."""
        return await run(lambda: client.set_cookies(cookies))

    # -------------------------------------------------------------------------
    # Log and Sync
    # -------------------------------------------------------------------------

    @mcp.tool()
    async def get_log(options: Optional[LogArgs] = None) -> str:
        """Read-only. Get main log entries. last_known_id is a cursor: only entries with a greater id are returned."""
        return await run(lambda: client.get_log(options.to_options() if options else None))

    @mcp.tool()
    async def get_peer_log(last_known_id: Optional[int] = None) -> str:
        """Read-only. Get peer log entries (banned/blocked peers), newer than last_known_id if given."""
        return await run(lambda: client.get_peer_log(last_known_id))

    @mcp.tool()
    async def get_main_data(rid: Optional[int] = None) -> str:
        """Read-only. Get the global sync snapshot, or the delta since response id rid."""
        return await run(lambda: client.get_main_data(rid))

    @mcp.tool()
    async def get_torrent_peers_data(hash: str, rid: Optional[int] = None) -> str:
        """Read-only. Get peers of one torrent, or the delta since response id rid."""
        return await run(lambda: client.get_torrent_peers_data(hash, rid))

    # -------------------------------------------------------------------------
    # Transfer
    # -------------------------------------------------------------------------

    @mcp.tool()
    async def get_global_transfer_info() -> str:
        """Read-only. Get global rates, totals, limits and connection status."""
        return await run(client.get_global_transfer_info)

    @mcp.tool()
    async def get_alternative_speed_limits_state() -> str:
        """Read-only. Whether alternative speed limits are active."""
        return await run(client.get_alternative_speed_limits_state)

    @mcp.tool()
    async def toggle_alternative_speed_limits() -> str:
        """Mutating. Toggle alternative speed limits."""
        return await run(client.toggle_alternative_speed_limits)

    @mcp.tool()
    async def get_global_download_limit() -> str:
        """Read-only. Global download limit in bytes/second (0 means unlimited)."""
        return await run(client.get_global_download_limit)

    @mcp.tool()
    async def set_global_download_limit(limit: int) -> str:
        """Mutating. Set the global download limit in bytes/second (0 means unlimited)."""
        return await run(lambda: client.set_global_download_limit(limit))

    @mcp.tool()
    async def get_global_upload_limit() -> str:
        """Read-only. Global upload limit in bytes/second (0 means unlimited)."""
        return await run(client.get_global_upload_limit)

    @mcp.tool()
    async def set_global_upload_limit(limit: int) -> str:
        """Mutating. Set the global upload limit in bytes/second (0 means unlimited)."""
        return await run(lambda: client.set_global_upload_limit(limit))

    @mcp.tool()
    async def ban_peers(peers: StrOrList) -> str:
        """Mutating. Ban peers globally; each peer is 'host:port'."""
        return await run(lambda: client.ban_peers(peers))

    # -------------------------------------------------------------------------
    # Torrent Queries
    # -------------------------------------------------------------------------

    @mcp.tool()
    async def get_torrent_list(options: Optional[TorrentListArgs] = None) -> str:
        """Read-only. List torrents with optional filter, category, tag, sorting and paging."""
        return await run(lambda: client.get_torrent_list(options.to_options() if options else None))

    @mcp.tool()
    async def get_torrent_generic_properties(hash: str) -> str:
        """Read-only. Get detailed properties of one torrent."""
        return await run(lambda: client.get_torrent_generic_properties(hash))

    @mcp.tool()
    async def get_torrent_trackers(hash: str) -> str:
        """Read-only. Get the trackers of one torrent."""
        return await run(lambda: client.get_torrent_trackers(hash))

    @mcp.tool()
    async def get_torrent_web_seeds(hash: str) -> str:
        """Read-only. Get the web seeds of one torrent."""
        return await run(lambda: client.get_torrent_web_seeds(hash))

    @mcp.tool()
    async def get_torrent_contents(hash: str) -> str:
        """Read-only. Get the file list of one torrent."""
        return await run(lambda: client.get_torrent_contents(hash))

    @mcp.tool()
    async def get_torrent_pieces_states(hash: str) -> str:
        """Read-only. Piece states of one torrent (0 missing, 1 downloading, 2 done)."""
        return await run(lambda: client.get_torrent_pieces_states(hash))

    @mcp.tool()
    async def get_torrent_pieces_hashes(hash: str) -> str:
        """Read-only. Piece hashes of one torrent."""
        return await run(lambda: client.get_torrent_pieces_hashes(hash))

    # -------------------------------------------------------------------------
    # Torrent Lifecycle
    # -------------------------------------------------------------------------

    @mcp.tool()
    async def stop_torrents(hashes: Hashes) -> str:
        """Mutating. Stop torrents (one hash, a list, or "all")."""
        return await run(lambda: client.stop_torrents(hashes))

    @mcp.tool()
    async def start_torrents(hashes: Hashes) -> str:
        """Mutating. Start torrents (one hash, a list, or "all")."""
        return await run(lambda: client.start_torrents(hashes))

    @mcp.tool()
    async def pause_torrents(hashes: Hashes) -> str:
        """Mutating. Pause torrents; same as stop_torrents."""
        return await run(lambda: client.pause_torrents(hashes))

    @mcp.tool()
    async def resume_torrents(hashes: Hashes) -> str:
        """Mutating. Resume torrents; same as start_torrents."""
        return await run(lambda: client.resume_torrents(hashes))

    @mcp.tool()
    async def delete_torrents(hashes: Hashes, delete_files: bool = False) -> str:
        """Mutating and high-risk. Remove torrents; delete_files also deletes downloaded data."""
        return await run(lambda: client.delete_torrents(hashes, delete_files))

    @mcp.tool()
    async def recheck_torrents(hashes: Hashes) -> str:
        """Mutating. Force a recheck of torrents."""
        return await run(lambda: client.recheck_torrents(hashes))

    @mcp.tool()
    async def reannounce_torrents(hashes: Hashes) -> str:
        """Mutating. Reannounce torrents to their trackers."""
        return await run(lambda: client.reannounce_torrents(hashes))

    # -------------------------------------------------------------------------
    # Adding Torrents
    # -------------------------------------------------------------------------

    @mcp.tool()
    async def add_new_torrent(
        torrent: Union[str, List[int]],
        filename: Optional[str] = None,
        options: Optional[AddTorrentArgs] = None,
    ) -> str:
        """Mutating. Add a torrent from .torrent contents given as a base64 string or byte array. Create categories and tags first."""
        async def add() -> bool:
            add_options = (options or AddTorrentArgs()).to_options(filename)
            return await client.add_new_torrent(decode_torrent(torrent), add_options)
        return await run(add)

    @mcp.tool()
    async def add_new_magnet(urls: StrOrList, options: Optional[AddTorrentArgs] = None) -> str:
        """Mutating. Add torrents by magnet link or URL. Create categories and tags first."""
        return await run(lambda: client.add_new_magnet(urls, options.to_options() if options else None))

    # -------------------------------------------------------------------------
    # Trackers and Peers
    # -------------------------------------------------------------------------

    @mcp.tool()
    async def edit_trackers(hash: str, orig_url: str, new_url: str) -> str:
        """Mutating. Replace one tracker URL of a torrent."""
        return await run(lambda: client.edit_trackers(hash, orig_url, new_url))

    @mcp.tool()
    async def remove_trackers(hash: str, urls: StrOrList) -> str:
        """Mutating. Remove tracker URLs from a torrent."""
        return await run(lambda: client.remove_trackers(hash, urls))

    @mcp.tool()
    async def add_trackers_to_torrent(hash: str, urls: StrOrList) -> str:
        """Mutating. Add tracker URLs to a torrent."""
        return await run(lambda: client.add_trackers_to_torrent(hash, urls))

    @mcp.tool()
    async def add_peers(hashes: Hashes, peers: StrOrList) -> str:
        """Mutating. Add peers ('host:port') to torrents."""
        return await run(lambda: client.add_peers(hashes, peers))

    # -------------------------------------------------------------------------
    # Torrent Settings
    # -------------------------------------------------------------------------

    @mcp.tool()
    async def set_torrent_share_limits(hashes: Hashes, limits: Optional[ShareLimitsArgs] = None) -> str:
        """Mutating. Set ratio and seeding time limits (-2 global, -1 unlimited)."""
        return await run(lambda: client.set_torrent_share_limits(hashes, (limits or ShareLimitsArgs()).to_limits()))

    @mcp.tool()
    async def increase_torrent_priority(hashes: Hashes) -> str:
        """Mutating. Move torrents one step up the queue."""
        return await run(lambda: client.increase_torrent_priority(hashes))

    @mcp.tool()
    async def decrease_torrent_priority(hashes: Hashes) -> str:
        """Mutating. Move torrents one step down the queue."""
        return await run(lambda: client.decrease_torrent_priority(hashes))

    @mcp.tool()
    async def maximal_torrent_priority(hashes: Hashes) -> str:
        """Mutating. Move torrents to the top of the queue."""
        return await run(lambda: client.maximal_torrent_priority(hashes))

    @mcp.tool()
    async def minimal_torrent_priority(hashes: Hashes) -> str:
        """Mutating. Move torrents to the bottom of the queue."""
        return await run(lambda: client.minimal_torrent_priority(hashes))

    @mcp.tool()
    async def set_file_priority(hash: str, file_ids: List[int], priority: int) -> str:
        """Mutating. Set file priority by file index (0 skip, 1 normal, 6 high, 7 maximal)."""
        return await run(lambda: client.set_file_priority(hash, file_ids, FilePriority(priority)))

    @mcp.tool()
    async def get_torrent_download_limit(hashes: Hashes) -> str:
        """Read-only. Per-torrent download limits in bytes/second, keyed by hash."""
        return await run(lambda: client.get_torrent_download_limit(hashes))

    @mcp.tool()
    async def set_torrent_download_limit(hashes: Hashes, limit: int) -> str:
        """Mutating. Set per-torrent download limit in bytes/second (0 means unlimited)."""
        return await run(lambda: client.set_torrent_download_limit(hashes, limit))

    @mcp.tool()
    async def get_torrent_upload_limit(hashes: Hashes) -> str:
        """Read-only. Per-torrent upload limits in bytes/second, keyed by hash."""
        return await run(lambda: client.get_torrent_upload_limit(hashes))

    @mcp.tool()
    async def set_torrent_upload_limit(hashes: Hashes, limit: int) -> str:
        """Mutating. Set per-torrent upload limit in bytes/second (0 means unlimited)."""
        return await run(lambda: client.set_torrent_upload_limit(hashes, limit))

    @mcp.tool()
    async def set_torrent_location(hashes: Hashes, location: str) -> str:
        """Mutating. Move torrents to a new save path."""
        return await run(lambda: client.set_torrent_location(hashes, location))

    @mcp.tool()
    async def set_torrent_name(hash: str, name: str) -> str:
        """Mutating. Rename a torrent."""
        return await run(lambda: client.set_torrent_name(hash, name))

    @mcp.tool()
    async def set_torrent_category(hashes: Hashes, category: str = "") -> str:
        """Mutating. Set a category on torrents; an empty category clears it."""
        return await run(lambda: client.set_torrent_category(hashes, category))

    @mcp.tool()
    async def set_automatic_torrent_management(hashes: Hashes, enable: bool) -> str:
        """Mutating. Enable or disable automatic torrent management."""
        return await run(lambda: client.set_automatic_torrent_management(hashes, enable))

    @mcp.tool()
    async def toggle_sequential_download(hashes: Hashes) -> str:
        """Mutating. Toggle sequential download."""
        return await run(lambda: client.toggle_sequential_download(hashes))

    @mcp.tool()
    async def set_first_last_piece_priority(hashes: Hashes) -> str:
        """Mutating. Toggle first/last piece priority."""
        return await run(lambda: client.set_first_last_piece_priority(hashes))

    @mcp.tool()
    async def set_force_start(hashes: Hashes, value: bool) -> str:
        """Mutating. Set force start."""
        return await run(lambda: client.set_force_start(hashes, value))

    @mcp.tool()
    async def set_super_seeding(hashes: Hashes, value: bool) -> str:
        """Mutating. Set super seeding."""
        return await run(lambda: client.set_super_seeding(hashes, value))

    # -------------------------------------------------------------------------
    # Categories and Tags
    # -------------------------------------------------------------------------

    @mcp.tool()
    async def get_all_categories() -> str:
        """Read-only. Get all categories with their save paths."""
        return await run(client.get_all_categories)

    @mcp.tool()
    async def add_new_category(category: str, save_path: str = "") -> str:
        """Mutating. Create a category, optionally with a save path."""
        return await run(lambda: client.add_new_category(category, save_path))

    @mcp.tool()
    async def edit_category(category: str, save_path: str = "") -> str:
        """Mutating. Change the save path of a category."""
        return await run(lambda: client.edit_category(category, save_path))

    @mcp.tool()
    async def remove_categories(categories: StrOrList) -> str:
        """Mutating. Remove categories."""
        return await run(lambda: client.remove_categories(categories))

    @mcp.tool()
    async def add_torrent_tags(hashes: Hashes, tags: StrOrList) -> str:
        """Mutating. Add tags to torrents."""
        return await run(lambda: client.add_torrent_tags(hashes, tags))

    @mcp.tool()
    async def remove_torrent_tags(hashes: Hashes, tags: Optional[StrOrList] = None) -> str:
        """Mutating. Remove tags from torrents; omit tags to remove all of them."""
        return await run(lambda: client.remove_torrent_tags(hashes, tags))

    @mcp.tool()
    async def get_all_tags() -> str:
        """Read-only. Get all tags."""
        return await run(client.get_all_tags)

    @mcp.tool()
    async def create_tags(tags: StrOrList) -> str:
        """Mutating. Create tags."""
        return await run(lambda: client.create_tags(tags))

    @mcp.tool()
    async def delete_tags(tags: StrOrList) -> str:
        """Mutating. Delete tags."""
        return await run(lambda: client.delete_tags(tags))

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    @mcp.tool()
    async def rename_file(hash: str, old_path: str, new_path: str) -> str:
        """Mutating. Rename a file inside a torrent."""
        return await run(lambda: client.rename_file(hash, old_path, new_path))

    @mcp.tool()
    async def rename_folder(hash: str, old_path: str, new_path: str) -> str:
        """Mutating. Rename a folder inside a torrent."""
        return await run(lambda: client.rename_folder(hash, old_path, new_path))

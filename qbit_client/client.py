"""
Async Python client for the qBittorrent WebUI API (v2).

Provides typed access to the WebUI including:
- Session handling (SID cookie login with automatic re-authentication)
- Application info and preferences
- Main and peer logs, sync data, global transfer limits
- Torrent operations (list, add, start, stop, delete, trackers, limits)
- Categories and tags

qBittorrent 5.0 renamed pause/resume to stop/start. The client detects the
server version after login and sends whichever spelling the server expects,
so both naming conventions work against both generations.

Usage:
    from qbit_client import QBittorrentClient

    async with QBittorrentClient(base_url="http://localhost:8080/api/v2",
                                 username="admin", password="secret") as client:
        torrents = await client.get_torrent_list(TorrentListOptions(filter="stopped"))
        await client.start_torrents([t["hash"] for t in torrents])
"""

import json
from typing import Any, Dict, List, Optional, Sequence, Union

from .auth import Authenticator
from .compat import lifecycle_endpoint, normalize_filter, translate_add_fields
from .config import ClientConfig
from .dispatcher import RequestDispatcher
from .exceptions import TorrentAddError
from .models import (
    AddTorrentOptions,
    FilePriority,
    HashesOrAll,
    LogEntry,
    LogOptions,
    PeerLogEntry,
    ShareLimits,
    TorrentListOptions,
)
from .session import SessionState, VersionInfo
from .transport import HttpTransport
from .utils import join_hashes, join_list, to_query_params, to_wire_fields


TORRENT_MIME_TYPE = "application/x-bittorrent"


class QBittorrentClient:
    def __init__(self, config: Optional[ClientConfig] = None, **overrides):
        self.config = (config or ClientConfig()).merge(**overrides)
        self.state = SessionState()
        self._transport = HttpTransport(self.config)
        self._auth = Authenticator(self.config, self.state, self._transport)
        self._dispatcher = RequestDispatcher(self.config, self.state, self._auth, self._transport)

    async def __aenter__(self) -> "QBittorrentClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        if self.state.sid:
            await self.logout()
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client (a caller-supplied http_client is left open)."""
        await self._transport.aclose()

    @property
    def version(self) -> Optional[VersionInfo]:
        """Cached server version, or None before login or if detection failed."""
        return self.state.version

    async def _request(self, path: str, method: str = "GET", **kwargs) -> Any:
        return await self._dispatcher.request(path, method, **kwargs)

    async def _post(self, path: str, data: Optional[Dict[str, Any]] = None) -> bool:
        """POST form fields to an action endpoint that answers with an empty body."""
        await self._request(path, "POST", data=data, parse_json=False)
        return True

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    async def login(self) -> bool:
        """Authenticate and cache the SID cookie. Also detects the server version."""
        return await self._auth.login()

    async def logout(self) -> bool:
        """Log out. Local session state is cleared even if the server call fails."""
        return await self._auth.logout()

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------

    async def get_application_version(self) -> str:
        """Application version string, e.g. 'v5.0.5'."""
        return await self._request("/app/version", parse_json=False)

    async def get_api_version(self) -> str:
        """WebUI API version, e.g. '2.11.2'."""
        return await self._request("/app/webapiVersion", parse_json=False)

    async def get_build_info(self) -> Dict[str, Any]:
        return await self._request("/app/buildInfo")

    async def get_application_preferences(self) -> Dict[str, Any]:
        return await self._request("/app/preferences")

    async def set_application_preferences(self, preferences: Dict[str, Any]) -> bool:
        """Update preferences. Only the keys present in preferences are changed."""
        return await self._post("/app/setPreferences", {"json": json.dumps(preferences)})

    async def get_default_save_path(self) -> str:
        return await self._request("/app/defaultSavePath", parse_json=False)

    async def get_cookies(self) -> List[Dict[str, Any]]:
        """Cookies qBittorrent uses when downloading torrents from URLs."""
        return await self._request("/app/cookies")

    async def set_cookies(self, cookies: List[Dict[str, Any]]) -> bool:
        return await self._post("/app/setCookies", {"cookies": json.dumps(cookies)})

    # -------------------------------------------------------------------------
    # Log
    # -------------------------------------------------------------------------

    async def get_log(self, options: Optional[LogOptions] = None) -> List[LogEntry]:
        """
        Get main log entries.

        Args:
            options: Severity flags (unset means included) and an optional
                last_known_id cursor; only entries with a greater id are returned
        """
        params = to_wire_fields(options)
        rows = await self._request("/log/main", params=params)
        return [LogEntry.from_dict(row) for row in rows]

    async def get_peer_log(self, last_known_id: Optional[int] = None) -> List[PeerLogEntry]:
        """Get peer log entries newer than last_known_id (all when omitted)."""
        params = {"last_known_id": last_known_id} if last_known_id is not None else None
        rows = await self._request("/log/peers", params=params)
        return [PeerLogEntry.from_dict(row) for row in rows]

    # -------------------------------------------------------------------------
    # Sync
    # -------------------------------------------------------------------------

    async def get_main_data(self, rid: Optional[int] = None) -> Dict[str, Any]:
        """
        Get the global sync snapshot, or the delta since response id rid.

        Omit rid (or pass 0) for a full update.
        """
        params = {"rid": rid} if rid else None
        return await self._request("/sync/maindata", params=params)

    async def get_torrent_peers_data(self, hash: str, rid: Optional[int] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {"hash": hash}
        if rid:
            params["rid"] = rid
        return await self._request("/sync/torrentPeers", params=params)

    # -------------------------------------------------------------------------
    # Transfer
    # -------------------------------------------------------------------------

    async def get_global_transfer_info(self) -> Dict[str, Any]:
        return await self._request("/transfer/info")

    async def get_alternative_speed_limits_state(self) -> bool:
        """True when alternative speed limits are active."""
        mode = await self._request("/transfer/speedLimitsMode", parse_json=False)
        return mode.strip() == "1"

    async def toggle_alternative_speed_limits(self) -> bool:
        return await self._post("/transfer/toggleSpeedLimitsMode")

    async def get_global_download_limit(self) -> int:
        """Global download limit in bytes/second (0 means unlimited)."""
        limit = await self._request("/transfer/downloadLimit", parse_json=False)
        return int(limit.strip() or 0)

    async def set_global_download_limit(self, limit_bytes_per_second: int) -> bool:
        return await self._post("/transfer/setDownloadLimit", {"limit": limit_bytes_per_second})

    async def get_global_upload_limit(self) -> int:
        """Global upload limit in bytes/second (0 means unlimited)."""
        limit = await self._request("/transfer/uploadLimit", parse_json=False)
        return int(limit.strip() or 0)

    async def set_global_upload_limit(self, limit_bytes_per_second: int) -> bool:
        return await self._post("/transfer/setUploadLimit", {"limit": limit_bytes_per_second})

    async def ban_peers(self, peers: Union[str, Sequence[str]]) -> bool:
        """Ban peers globally. Each peer is 'host:port'."""
        return await self._post("/transfer/banPeers", {"peers": join_list(peers, "|")})

    # -------------------------------------------------------------------------
    # Torrent Queries
    # -------------------------------------------------------------------------

    async def get_torrent_list(self, options: Optional[TorrentListOptions] = None) -> List[Dict[str, Any]]:
        """
        List torrents.

        The filter accepts both the 4.x ('paused', 'resumed') and the 5.x
        ('stopped', 'running') vocabulary; it is translated to whatever the
        connected server understands.
        """
        params = to_wire_fields(options)
        if "hashes" in params:
            params["hashes"] = join_hashes(params["hashes"])
        if "filter" in params:
            params["filter"] = normalize_filter(params["filter"], self.state.version)
        return await self._request("/torrents/info", params=params)

    async def get_torrent_generic_properties(self, hash: str) -> Dict[str, Any]:
        return await self._request("/torrents/properties", params={"hash": hash})

    async def get_torrent_trackers(self, hash: str) -> List[Dict[str, Any]]:
        return await self._request("/torrents/trackers", params={"hash": hash})

    async def get_torrent_web_seeds(self, hash: str) -> List[Dict[str, Any]]:
        return await self._request("/torrents/webseeds", params={"hash": hash})

    async def get_torrent_contents(self, hash: str) -> List[Dict[str, Any]]:
        return await self._request("/torrents/files", params={"hash": hash})

    async def get_torrent_pieces_states(self, hash: str) -> List[int]:
        """Piece states in piece order: 0 not downloaded, 1 downloading, 2 downloaded."""
        return await self._request("/torrents/pieceStates", params={"hash": hash})

    async def get_torrent_pieces_hashes(self, hash: str) -> List[str]:
        return await self._request("/torrents/pieceHashes", params={"hash": hash})

    # -------------------------------------------------------------------------
    # Torrent Lifecycle
    # -------------------------------------------------------------------------

    async def stop_torrents(self, hashes: HashesOrAll) -> bool:
        """Stop torrents ('all' for every torrent). Uses /torrents/pause before 5.0."""
        endpoint = lifecycle_endpoint("stop", self.state.version)
        return await self._post(endpoint, {"hashes": join_hashes(hashes)})

    async def pause_torrents(self, hashes: HashesOrAll) -> bool:
        """Alias of stop_torrents."""
        return await self.stop_torrents(hashes)

    async def start_torrents(self, hashes: HashesOrAll) -> bool:
        """Start torrents ('all' for every torrent). Uses /torrents/resume before 5.0."""
        endpoint = lifecycle_endpoint("start", self.state.version)
        return await self._post(endpoint, {"hashes": join_hashes(hashes)})

    async def resume_torrents(self, hashes: HashesOrAll) -> bool:
        """Alias of start_torrents."""
        return await self.start_torrents(hashes)

    async def delete_torrents(self, hashes: HashesOrAll, delete_files: bool = False) -> bool:
        """Remove torrents; delete_files also removes downloaded data from disk."""
        return await self._post("/torrents/delete", {
            "hashes": join_hashes(hashes),
            "deleteFiles": delete_files,
        })

    async def recheck_torrents(self, hashes: HashesOrAll) -> bool:
        return await self._post("/torrents/recheck", {"hashes": join_hashes(hashes)})

    async def reannounce_torrents(self, hashes: HashesOrAll) -> bool:
        return await self._post("/torrents/reannounce", {"hashes": join_hashes(hashes)})

    # -------------------------------------------------------------------------
    # Adding Torrents
    # -------------------------------------------------------------------------

    def _add_form_fields(self, options: Optional[AddTorrentOptions]) -> Dict[str, str]:
        fields = to_wire_fields(options)
        if "tags" in fields:
            fields["tags"] = join_list(fields["tags"], ",")
        # Automatic torrent management owns the save path
        if fields.get("autoTMM") is True:
            fields["savepath"] = ""
        fields = translate_add_fields(fields, self.state.version)
        return to_query_params(fields)

    async def _add(self, files: List[Any]) -> bool:
        result = await self._request("/torrents/add", "POST", files=files, parse_json=False)
        if result.strip() == "Fails.":
            raise TorrentAddError("qBittorrent rejected the torrent (Fails.)", body=result)
        return True

    async def add_new_torrent(self, torrent: bytes, options: Optional[AddTorrentOptions] = None) -> bool:
        """
        Add a torrent from raw .torrent file contents.

        Args:
            torrent: Bencoded .torrent bytes
            options: Add-torrent form fields. On 5.x servers 'paused' is sent
                as 'stopped' unless 'stopped' is set explicitly.

        Returns:
            True if qBittorrent accepted the torrent

        Raises:
            TorrentAddError: If qBittorrent answers 'Fails.'
        """
        filename = (options.filename if options else None) or "torrent"
        form = [(key, (None, value)) for key, value in self._add_form_fields(options).items()]
        form.append(("torrents", (filename, torrent, TORRENT_MIME_TYPE)))
        return await self._add(form)

    async def add_new_magnet(
        self,
        urls: Union[str, Sequence[str]],
        options: Optional[AddTorrentOptions] = None,
    ) -> bool:
        """
        Add torrents by magnet or HTTP URL. Multiple URLs are sent newline-separated.

        Raises:
            TorrentAddError: If qBittorrent answers 'Fails.'
        """
        form = [("urls", (None, join_list(urls, "\n")))]
        form.extend((key, (None, value)) for key, value in self._add_form_fields(options).items())
        return await self._add(form)

    # -------------------------------------------------------------------------
    # Trackers and Peers
    # -------------------------------------------------------------------------

    async def edit_trackers(self, hash: str, orig_url: str, new_url: str) -> bool:
        return await self._post("/torrents/editTrackers", {
            "hash": hash,
            "origUrl": orig_url,
            "newUrl": new_url,
        })

    async def remove_trackers(self, hash: str, urls: Union[str, Sequence[str]]) -> bool:
        """Remove trackers from a torrent. Multiple URLs are joined by '|'."""
        return await self._post("/torrents/removeTrackers", {"hash": hash, "urls": join_list(urls, "|")})

    async def add_trackers_to_torrent(self, hash: str, urls: Union[str, Sequence[str]]) -> bool:
        """Add trackers to a torrent. Multiple URLs are joined by newlines."""
        return await self._post("/torrents/addTrackers", {"hash": hash, "urls": join_list(urls, "\n")})

    async def add_peers(self, hashes: HashesOrAll, peers: Union[str, Sequence[str]]) -> bool:
        """Add peers ('host:port') to torrents."""
        return await self._post("/torrents/addPeers", {
            "hashes": join_hashes(hashes),
            "peers": join_list(peers, "|"),
        })

    # -------------------------------------------------------------------------
    # Torrent Settings
    # -------------------------------------------------------------------------

    async def set_torrent_share_limits(self, hashes: HashesOrAll, limits: ShareLimits) -> bool:
        data = to_wire_fields(limits)
        data["hashes"] = join_hashes(hashes)
        return await self._post("/torrents/setShareLimits", data)

    async def increase_torrent_priority(self, hashes: HashesOrAll) -> bool:
        """Move torrents one step up the queue."""
        return await self._post("/torrents/increasePrio", {"hashes": join_hashes(hashes)})

    async def decrease_torrent_priority(self, hashes: HashesOrAll) -> bool:
        """Move torrents one step down the queue."""
        return await self._post("/torrents/decreasePrio", {"hashes": join_hashes(hashes)})

    async def maximal_torrent_priority(self, hashes: HashesOrAll) -> bool:
        """Move torrents to the top of the queue."""
        return await self._post("/torrents/topPrio", {"hashes": join_hashes(hashes)})

    async def minimal_torrent_priority(self, hashes: HashesOrAll) -> bool:
        """Move torrents to the bottom of the queue."""
        return await self._post("/torrents/bottomPrio", {"hashes": join_hashes(hashes)})

    async def set_file_priority(
        self,
        hash: str,
        file_ids: Union[int, str, Sequence[Union[int, str]]],
        priority: Union[FilePriority, int],
    ) -> bool:
        """Set the download priority of one or more files (by index) inside a torrent."""
        if isinstance(file_ids, (int, str)):
            file_ids = [file_ids]
        return await self._post("/torrents/filePrio", {
            "hash": hash,
            "id": join_list([str(i) for i in file_ids], "|"),
            "priority": int(priority),
        })

    async def get_torrent_download_limit(self, hashes: Union[str, Sequence[str]]) -> Dict[str, int]:
        """Per-torrent download limits keyed by hash, in bytes/second (0 means unlimited)."""
        return await self._request("/torrents/downloadLimit", "POST", data={"hashes": join_hashes(hashes)})

    async def set_torrent_download_limit(self, hashes: Union[str, Sequence[str]], limit_bytes_per_second: int) -> bool:
        return await self._post("/torrents/setDownloadLimit", {
            "hashes": join_hashes(hashes),
            "limit": limit_bytes_per_second,
        })

    async def get_torrent_upload_limit(self, hashes: Union[str, Sequence[str]]) -> Dict[str, int]:
        """Per-torrent upload limits keyed by hash, in bytes/second (0 means unlimited)."""
        return await self._request("/torrents/uploadLimit", "POST", data={"hashes": join_hashes(hashes)})

    async def set_torrent_upload_limit(self, hashes: Union[str, Sequence[str]], limit_bytes_per_second: int) -> bool:
        return await self._post("/torrents/setUploadLimit", {
            "hashes": join_hashes(hashes),
            "limit": limit_bytes_per_second,
        })

    async def set_torrent_location(self, hashes: HashesOrAll, location: str) -> bool:
        return await self._post("/torrents/setLocation", {"hashes": join_hashes(hashes), "location": location})

    async def set_torrent_name(self, hash: str, name: str) -> bool:
        return await self._post("/torrents/rename", {"hash": hash, "name": name})

    async def set_torrent_category(self, hashes: HashesOrAll, category: str = "") -> bool:
        """Assign a category; an empty category removes the assignment."""
        return await self._post("/torrents/setCategory", {"hashes": join_hashes(hashes), "category": category})

    async def set_automatic_torrent_management(self, hashes: HashesOrAll, enable: bool) -> bool:
        return await self._post("/torrents/setAutoManagement", {"hashes": join_hashes(hashes), "enable": enable})

    async def toggle_sequential_download(self, hashes: HashesOrAll) -> bool:
        return await self._post("/torrents/toggleSequentialDownload", {"hashes": join_hashes(hashes)})

    async def set_first_last_piece_priority(self, hashes: HashesOrAll) -> bool:
        """Toggle first/last piece priority."""
        return await self._post("/torrents/toggleFirstLastPiecePrio", {"hashes": join_hashes(hashes)})

    async def set_force_start(self, hashes: HashesOrAll, value: bool) -> bool:
        return await self._post("/torrents/setForceStart", {"hashes": join_hashes(hashes), "value": value})

    async def set_super_seeding(self, hashes: HashesOrAll, value: bool) -> bool:
        return await self._post("/torrents/setSuperSeeding", {"hashes": join_hashes(hashes), "value": value})

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def get_all_categories(self) -> Dict[str, Dict[str, Any]]:
        """Categories keyed by name."""
        return await self._request("/torrents/categories")

    async def add_new_category(self, category: str, save_path: str = "") -> bool:
        return await self._post("/torrents/createCategory", {"category": category, "savePath": save_path})

    async def edit_category(self, category: str, save_path: str = "") -> bool:
        return await self._post("/torrents/editCategory", {"category": category, "savePath": save_path})

    async def remove_categories(self, categories: Union[str, Sequence[str]]) -> bool:
        """Remove categories. Multiple names are joined by newlines."""
        return await self._post("/torrents/removeCategories", {"categories": join_list(categories, "\n")})

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    async def add_torrent_tags(self, hashes: HashesOrAll, tags: Union[str, Sequence[str]]) -> bool:
        return await self._post("/torrents/addTags", {
            "hashes": join_hashes(hashes),
            "tags": join_list(tags, ","),
        })

    async def remove_torrent_tags(self, hashes: HashesOrAll, tags: Optional[Union[str, Sequence[str]]] = None) -> bool:
        """Remove tags from torrents; without tags every tag is removed."""
        data = {"hashes": join_hashes(hashes)}
        if tags is not None:
            data["tags"] = join_list(tags, ",")
        return await self._post("/torrents/removeTags", data)

    async def get_all_tags(self) -> List[str]:
        return await self._request("/torrents/tags")

    async def create_tags(self, tags: Union[str, Sequence[str]]) -> bool:
        return await self._post("/torrents/createTags", {"tags": join_list(tags, ",")})

    async def delete_tags(self, tags: Union[str, Sequence[str]]) -> bool:
        return await self._post("/torrents/deleteTags", {"tags": join_list(tags, ",")})

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    async def rename_file(self, hash: str, old_path: str, new_path: str) -> bool:
        """Rename a file inside a torrent (paths are relative to the torrent root)."""
        return await self._post("/torrents/renameFile", {"hash": hash, "oldPath": old_path, "newPath": new_path})

    async def rename_folder(self, hash: str, old_path: str, new_path: str) -> bool:
        return await self._post("/torrents/renameFolder", {"hash": hash, "oldPath": old_path, "newPath": new_path})

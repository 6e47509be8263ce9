"""Pydantic argument models for the structured MCP tool inputs."""

import base64
import binascii
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from ..models import TORRENT_FILTERS, AddTorrentOptions, LogOptions, ShareLimits, TorrentListOptions

Hashes = Union[str, List[str]]
TorrentFilter = Literal[TORRENT_FILTERS]


class TorrentListArgs(BaseModel):
    """Filters for get_torrent_list."""

    filter: Optional[TorrentFilter] = Field(
        default=None,
        description="all, downloading, seeding, completed, stopped/paused, running/resumed, "
                    "active, inactive, stalled, stalled_uploading, stalled_downloading, "
                    "checking, moving or errored",
    )
    category: Optional[str] = Field(default=None, description="Category name, empty string for none")
    tag: Optional[str] = Field(default=None, description="Tag name, empty string for none")
    sort: Optional[str] = Field(default=None, description="Torrent field to sort by, e.g. 'added_on'")
    reverse: Optional[bool] = None
    limit: Optional[int] = Field(default=None, ge=0)
    offset: Optional[int] = Field(default=None, ge=0)
    hashes: Optional[Hashes] = None
    is_private: Optional[bool] = Field(default=None, description="Only private (true) or only public (false) torrents")
    include_trackers: Optional[bool] = Field(default=None, description="Add each torrent's trackers to the result")

    def to_options(self) -> TorrentListOptions:
        return TorrentListOptions(**self.model_dump())


class LogArgs(BaseModel):
    normal: Optional[bool] = None
    info: Optional[bool] = None
    warning: Optional[bool] = None
    critical: Optional[bool] = None
    last_known_id: Optional[int] = Field(default=None, description="Only return entries with a greater id")

    def to_options(self) -> LogOptions:
        return LogOptions(**self.model_dump())


class AddTorrentArgs(BaseModel):
    """Options shared by add_new_torrent and add_new_magnet."""

    savepath: Optional[str] = None
    cookie: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[Union[str, List[str]]] = None
    skip_checking: Optional[bool] = None
    paused: Optional[bool] = Field(default=None, description="Pre-5.0 name for stopped")
    stopped: Optional[bool] = Field(default=None, description="Add without starting")
    root_folder: Optional[bool] = None
    content_layout: Optional[str] = Field(default=None, description="Original, Subfolder or NoSubfolder")
    rename: Optional[str] = None
    up_limit: Optional[int] = Field(default=None, description="Bytes/second")
    dl_limit: Optional[int] = Field(default=None, description="Bytes/second")
    ratio_limit: Optional[float] = None
    seeding_time_limit: Optional[int] = Field(default=None, description="Minutes")
    auto_tmm: Optional[bool] = Field(default=None, description="Automatic torrent management")
    sequential_download: Optional[bool] = None
    first_last_piece_prio: Optional[bool] = None

    def to_options(self, filename: Optional[str] = None) -> AddTorrentOptions:
        return AddTorrentOptions(filename=filename, **self.model_dump())


class ShareLimitsArgs(BaseModel):
    """-2 uses the global limit, -1 means unlimited."""

    ratio_limit: float = -2
    seeding_time_limit: int = Field(default=-2, description="Minutes")
    inactive_seeding_time_limit: int = Field(default=-2, description="Minutes")

    def to_limits(self) -> ShareLimits:
        return ShareLimits(**self.model_dump())


def decode_torrent(torrent: Union[str, List[int]]) -> bytes:
    """Decode a .torrent payload sent as a base64 string or a byte array."""
    if isinstance(torrent, str):
        try:
            return base64.b64decode(torrent, validate=True)
        except binascii.Error as e:
            raise ValueError(f"torrent is not valid base64: {e}") from e
    return bytes(torrent)

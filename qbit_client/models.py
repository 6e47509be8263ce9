"""
Typed request options and response records for the WebUI API.

Option dataclasses are flattened into wire parameters with
utils.to_wire_fields: unset (None) fields are not sent, and fields whose
Python name differs from the WebUI parameter carry it in metadata["wire"].
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional, Sequence, Union

HashesOrAll = Union[str, Sequence[str]]

# Filter values accepted by /torrents/info; stopped/paused and
# running/resumed are translated to the server's generation.
TORRENT_FILTERS = (
    "all",
    "downloading",
    "seeding",
    "completed",
    "paused",
    "stopped",
    "active",
    "inactive",
    "resumed",
    "running",
    "stalled",
    "stalled_uploading",
    "stalled_downloading",
    "checking",
    "moving",
    "errored",
)


class LogType(IntEnum):
    NORMAL = 1
    INFO = 2
    WARNING = 4
    CRITICAL = 8


class FilePriority(IntEnum):
    DO_NOT_DOWNLOAD = 0
    NORMAL = 1
    HIGH = 6
    MAXIMAL = 7


@dataclass
class LogEntry:
    id: int
    message: str
    timestamp: int
    type: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogEntry":
        return cls(
            id=int(data["id"]),
            message=data.get("message", ""),
            timestamp=int(data.get("timestamp", 0)),
            type=int(data.get("type", LogType.NORMAL)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "message": self.message, "timestamp": self.timestamp, "type": self.type}


@dataclass
class PeerLogEntry:
    id: int
    ip: str
    timestamp: int
    blocked: bool
    reason: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PeerLogEntry":
        return cls(
            id=int(data["id"]),
            ip=data.get("ip", ""),
            timestamp=int(data.get("timestamp", 0)),
            blocked=bool(data.get("blocked", False)),
            reason=data.get("reason", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "ip": self.ip,
            "timestamp": self.timestamp,
            "blocked": self.blocked,
            "reason": self.reason,
        }


@dataclass
class LogOptions:
    """Severity flags default to included; last_known_id is an exclusive cursor."""
    normal: Optional[bool] = None
    info: Optional[bool] = None
    warning: Optional[bool] = None
    critical: Optional[bool] = None
    last_known_id: Optional[int] = None

    def includes(self, entry: LogEntry) -> bool:
        if self.last_known_id is not None and entry.id <= self.last_known_id:
            return False

        allowed = {
            LogType.NORMAL: self.normal,
            LogType.INFO: self.info,
            LogType.WARNING: self.warning,
            LogType.CRITICAL: self.critical,
        }
        flag = allowed.get(entry.type)
        return flag is None or flag


@dataclass
class TorrentListOptions:
    hashes: Optional[HashesOrAll] = None
    filter: Optional[str] = None
    # Empty string means "without category"/"without tag"
    category: Optional[str] = None
    tag: Optional[str] = None
    sort: Optional[str] = None
    reverse: Optional[bool] = None
    limit: Optional[int] = None
    offset: Optional[int] = None
    is_private: Optional[bool] = field(default=None, metadata={"wire": "private"})
    include_trackers: Optional[bool] = field(default=None, metadata={"wire": "includeTrackers"})


@dataclass
class AddTorrentOptions:
    """
    Form fields for /torrents/add, shared by .torrent uploads and magnets.

    paused is the pre-5.0 spelling of stopped; the client translates it for
    5.x servers. filename is only used to name the uploaded file part.
    """
    savepath: Optional[str] = None
    cookie: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[Union[str, List[str]]] = None
    skip_checking: Optional[bool] = None
    paused: Optional[bool] = None
    stopped: Optional[bool] = None
    root_folder: Optional[bool] = None
    content_layout: Optional[str] = field(default=None, metadata={"wire": "contentLayout"})
    rename: Optional[str] = None
    up_limit: Optional[int] = field(default=None, metadata={"wire": "upLimit"})
    dl_limit: Optional[int] = field(default=None, metadata={"wire": "dlLimit"})
    ratio_limit: Optional[float] = field(default=None, metadata={"wire": "ratioLimit"})
    seeding_time_limit: Optional[int] = field(default=None, metadata={"wire": "seedingTimeLimit"})
    auto_tmm: Optional[bool] = field(default=None, metadata={"wire": "autoTMM"})
    sequential_download: Optional[bool] = field(default=None, metadata={"wire": "sequentialDownload"})
    first_last_piece_prio: Optional[bool] = field(default=None, metadata={"wire": "firstLastPiecePrio"})
    filename: Optional[str] = field(default=None, metadata={"wire": None})


@dataclass
class ShareLimits:
    # -2 means use the global limit, -1 means no limit
    ratio_limit: float = field(default=-2, metadata={"wire": "ratioLimit"})
    seeding_time_limit: int = field(default=-2, metadata={"wire": "seedingTimeLimit"})
    inactive_seeding_time_limit: int = field(default=-2, metadata={"wire": "inactiveSeedingTimeLimit"})

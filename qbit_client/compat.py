"""
qBittorrent 4.x / 5.x wire compatibility.

qBittorrent 5.0 renamed the pause/resume vocabulary to stop/start: the
endpoints, the torrent list filter values and the add-torrent option key.
Every version-sensitive endpoint asks this module which spelling to use.
Without a confirmed version the legacy (4.x) spelling is used.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .session import VersionInfo


@dataclass(frozen=True)
class ApiFlavor:
    stop_endpoint: str
    start_endpoint: str
    # Filter values from the other generation mapped to this one
    filter_aliases: Mapping[str, str] = field(default_factory=dict)
    # Add-torrent form key for "add without starting"
    stopped_option: str = "paused"


LEGACY = ApiFlavor(
    stop_endpoint="/torrents/pause",
    start_endpoint="/torrents/resume",
    filter_aliases={"stopped": "paused", "running": "resumed"},
    stopped_option="paused",
)

MODERN = ApiFlavor(
    stop_endpoint="/torrents/stop",
    start_endpoint="/torrents/start",
    filter_aliases={"paused": "stopped", "resumed": "running"},
    stopped_option="stopped",
)


def flavor_for(version: Optional[VersionInfo]) -> ApiFlavor:
    if version is not None and version.is_v5_or_higher:
        return MODERN
    return LEGACY


def lifecycle_endpoint(action: str, version: Optional[VersionInfo]) -> str:
    """Endpoint for 'stop' (alias 'pause') or 'start' (alias 'resume')."""
    flavor = flavor_for(version)
    if action in ("stop", "pause"):
        return flavor.stop_endpoint
    if action in ("start", "resume"):
        return flavor.start_endpoint
    raise ValueError(f"Unknown lifecycle action: {action}")


def normalize_filter(value: Optional[str], version: Optional[VersionInfo]) -> Optional[str]:
    """Translate a torrent list filter into the server generation's vocabulary."""
    if value is None:
        return None
    return flavor_for(version).filter_aliases.get(value, value)


def translate_add_fields(fields: Dict[str, Any], version: Optional[VersionInfo]) -> Dict[str, Any]:
    """
    Rename the legacy add-torrent stop option to the server generation's key.

    An explicit value under the server's own key always wins; the legacy
    key is never sent to a server that does not use it. Returns a new dict.
    """
    result = dict(fields)
    option = flavor_for(version).stopped_option
    legacy_option = LEGACY.stopped_option
    if option != legacy_option and legacy_option in result:
        value = result.pop(legacy_option)
        result.setdefault(option, value)
    return result

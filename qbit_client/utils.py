"""
Parameter normalization helpers for the qBittorrent WebUI API.

The WebUI expects flat string parameters: multiple hashes joined by '|',
tags by ',', URLs and category names by newlines, booleans as 'true'/'false'.
Everything here is pure and side-effect free.
"""

import re
from dataclasses import fields, is_dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Union

StrOrList = Union[str, Sequence[str]]

_NUMERIC_RUN = re.compile(r"(\d+)")


def join_list(value: StrOrList, delimiter: str) -> str:
    """Join a sequence of strings with delimiter; a single string passes through."""
    if isinstance(value, str):
        return value
    return delimiter.join(value)


def join_hashes(value: StrOrList) -> str:
    """Join torrent hashes with '|' (also accepts a single hash or 'all')."""
    return join_list(value, "|")


def _natural_key(value: str):
    key = []
    for i, run in enumerate(_NUMERIC_RUN.split(value)):
        if not run:
            continue
        if i % 2:
            key.append((0, int(run), run))
        else:
            key.append((1, run.casefold(), run))
    return key


def is_greater(a: str, b: str) -> bool:
    """
    Numeric-aware comparison: digit runs compare as integers, so
    "5.10.0" follows "5.2.0". Returns True only if a strictly follows b.
    """
    return _natural_key(a) > _natural_key(b)


def join_url(*segments: Optional[str]) -> str:
    """
    Join URL segments with single slashes between them.

    Empty or None segments are skipped. The first segment only loses its
    trailing slashes so a scheme or absolute path survives.
    """
    parts = [s for s in segments if s]
    if not parts:
        return ""

    url = parts[0].rstrip("/")
    for part in parts[1:]:
        clean = part.strip("/")
        if clean:
            url += f"/{clean}"
    return url


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_query_params(params: Mapping[str, Any]) -> Dict[str, str]:
    """Stringify every value (booleans as 'true'/'false'), dropping None."""
    return {key: _stringify(value) for key, value in params.items() if value is not None}


def to_wire_fields(options: Any) -> Dict[str, Any]:
    """
    Flatten an options dataclass into a dict keyed by WebUI parameter names.

    Fields set to None are left out. A field can declare its wire name with
    field(metadata={"wire": "camelCaseName"}); a wire name of
    None marks a field that is never sent.
    """
    if options is None:
        return {}
    if not is_dataclass(options):
        raise TypeError(f"Expected an options dataclass, got {type(options).__name__}")

    result = {}
    for f in fields(options):
        value = getattr(options, f.name)
        if value is None:
            continue
        wire = f.metadata.get("wire", f.name)
        if wire is None:
            continue
        result[wire] = value
    return result


def format_bytes(size):
    """Format bytes as human-readable string."""
    if size is None:
        return "N/A"
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024:
            return f"{size:.2f} {unit}"
        size /= 1024
    return f"{size:.2f} PB"

"""
Success/error envelope shared by MCP tools and resources.

Every bridged call runs through run_with_error_payload. A failure never
escapes as a bare exception: it becomes an error payload holding the message
and the most recent qBittorrent main log entries, so the model calling the
tool sees what the server logged around the failure.
"""

import json
import time
from dataclasses import asdict, dataclass, is_dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

from ..config import Config
from ..logger import logger
from ..log_persister import LogPersister

JSON_MIME_TYPE = "application/json"

T = TypeVar("T")


@dataclass
class ExecutionResult(Generic[T]):
    ok: bool
    data: Optional[T] = None
    error: Optional[Dict[str, Any]] = None


def _jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    return str(value)


def to_json_resource(data: Any) -> str:
    """Pretty-printed JSON text for a resource body (dataclasses become objects)."""
    try:
        return json.dumps(data, indent=2, default=_jsonable)
    except (TypeError, ValueError):
        return str(data)


def format_result_text(value: Any) -> str:
    """Tool result text: booleans as 'true'/'false', scalars as-is, everything else as JSON."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    return to_json_resource(value)


def get_error_message(error: Any) -> str:
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    if isinstance(error, str):
        return error
    return to_json_resource(error)


async def build_error_payload(
    persister: LogPersister,
    started_at: float,
    error: Any,
    window_seconds: int = Config.MCP_LOG_WINDOW_SECONDS,
    limit: int = Config.MCP_LOG_LIMIT,
) -> Dict[str, Any]:
    """
    Build the error payload for a failed call.

    Args:
        persister: Log cache used to look up recent main log entries
        started_at: Unix time the failed call started
        error: The exception (or message) that ended the call
        window_seconds: Entries logged this long before started_at (or later) count as recent
        limit: Maximum number of log entries attached

    Returns:
        {"error": message, "logs": [...]} with the last `limit` recent entries,
        or the last `limit` entries overall when none are recent. If the logs
        themselves cannot be fetched, "logs" is empty and "logs_error" says why.
    """
    payload: Dict[str, Any] = {"error": get_error_message(error), "logs": []}

    try:
        logs = await persister.get_main_logs()
    except Exception as e:
        logger.warning(f"Could not attach qBittorrent logs to error payload: {e}")
        payload["logs_error"] = get_error_message(e)
        return payload

    recent = [entry for entry in logs if entry.timestamp >= started_at - window_seconds]
    chosen = recent[-limit:] if recent else logs[-limit:]
    payload["logs"] = [entry.to_dict() for entry in chosen]
    return payload


async def run_with_error_payload(
    persister: LogPersister,
    handler: Callable[[], Awaitable[T]],
) -> ExecutionResult[T]:
    """Await handler and wrap its outcome; exceptions become an error payload."""
    started_at = time.time()
    try:
        data = await handler()
    except Exception as e:
        logger.error(f"qBittorrent call failed: {get_error_message(e)}")
        return ExecutionResult(ok=False, error=await build_error_payload(persister, started_at, e))
    return ExecutionResult(ok=True, data=data)

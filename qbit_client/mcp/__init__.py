from .envelope import ExecutionResult, build_error_payload, run_with_error_payload
from .server import create_server, run_server

__all__ = [
    "ExecutionResult",
    "build_error_payload",
    "run_with_error_payload",
    "create_server",
    "run_server",
]

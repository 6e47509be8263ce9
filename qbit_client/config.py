import os
from dataclasses import dataclass, fields, replace
from typing import Optional

import dotenv
import httpx


dotenv.load_dotenv()


# Defaults
VERBOSE = False
LOG_PATH = "qbit_client.log"
LOG_LEVEL = "INFO"
LOG_ROTATION = "1 week"
LOG_RETENTION = "1 month"

# qBittorrent WebUI
QBIT_BASE_URL = "http://localhost:8080/api/v2"
QBIT_USERNAME = ""
QBIT_PASSWORD = ""
QBIT_TIMEOUT = 5.0                     # Seconds, 0 disables the bound

# Log persister
LOG_SYNC_MAX_PAGES = 10

# MCP error context
MCP_LOG_WINDOW_SECONDS = 30
MCP_LOG_LIMIT = 10


class Config:
    VERBOSE = os.getenv("VERBOSE", str(VERBOSE)).lower() == "true"

    LOG_PATH = os.getenv("LOG_PATH", LOG_PATH)
    LOG_LEVEL = os.getenv("LOG_LEVEL", LOG_LEVEL)
    LOG_ROTATION = os.getenv("LOG_ROTATION", LOG_ROTATION)
    LOG_RETENTION = os.getenv("LOG_RETENTION", LOG_RETENTION)

    # qBittorrent WebUI Configuration
    QBIT_BASE_URL = os.getenv("QBIT_BASE_URL", QBIT_BASE_URL)
    QBIT_USERNAME = os.getenv("QBIT_USERNAME", QBIT_USERNAME)
    QBIT_PASSWORD = os.getenv("QBIT_PASSWORD", QBIT_PASSWORD)
    QBIT_TIMEOUT = float(os.getenv("QBIT_TIMEOUT", QBIT_TIMEOUT))

    LOG_SYNC_MAX_PAGES = int(os.getenv("LOG_SYNC_MAX_PAGES", LOG_SYNC_MAX_PAGES))

    MCP_LOG_WINDOW_SECONDS = int(os.getenv("MCP_LOG_WINDOW_SECONDS", MCP_LOG_WINDOW_SECONDS))
    MCP_LOG_LIMIT = int(os.getenv("MCP_LOG_LIMIT", MCP_LOG_LIMIT))


@dataclass(frozen=True)
class ClientConfig:
    """
    Connection settings for a single QBittorrentClient.

    transport replaces the network layer of the internally created
    httpx.AsyncClient (useful for proxies or httpx.MockTransport in tests).
    http_client replaces the whole client; it is never closed by us.
    """
    base_url: str = Config.QBIT_BASE_URL
    username: str = Config.QBIT_USERNAME
    password: str = Config.QBIT_PASSWORD
    timeout: float = Config.QBIT_TIMEOUT
    transport: Optional[httpx.AsyncBaseTransport] = None
    http_client: Optional[httpx.AsyncClient] = None

    def merge(self, **overrides) -> "ClientConfig":
        """Return a copy with every non-None override applied."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"Unknown client config option(s): {', '.join(sorted(unknown))}")
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

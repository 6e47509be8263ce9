"""
MCP server exposing a qBittorrent instance over stdio.

Usage:
    client = QBittorrentClient(base_url=..., username=..., password=...)
    await run_server(client)
"""

from mcp.server.fastmcp import FastMCP

from ..client import QBittorrentClient
from ..log_persister import LogPersister
from ..logger import logger
from .resources import register_resources
from .tools import register_tools

SERVER_NAME = "qbit-client"

INSTRUCTIONS = (
    "qBittorrent control bridge over the WebUI API. Call the snake_case tools "
    "(for example get_torrent_list, add_new_magnet) and read qbittorrent:// "
    "resources to query or change torrents, trackers, categories, tags, limits "
    "and preferences.\n"
    "Safety policy: default to read-only tools. Only run a tool marked Mutating "
    "when the user explicitly asks for that action. Deleting, removing, renaming, "
    "stopping, rechecking, reannouncing and changing preferences are high-risk. "
    "Never pass hashes=\"all\" to a destructive tool unless the user said \"all\". "
    "Read the current state before changing it, state the planned change, and read "
    "it back afterwards to confirm.\n"
    "When a tool fails, inspect the attached logs or call get_log; for peer or "
    "connection problems also call get_peer_log. For add_new_torrent the torrent "
    "must be a base64 string or a byte array."
)


def create_server(client: QBittorrentClient) -> FastMCP:
    """Build the MCP server with all tools and resources bound to client."""
    mcp = FastMCP(SERVER_NAME, instructions=INSTRUCTIONS)
    persister = LogPersister(client)

    register_tools(mcp, client, persister)
    register_resources(mcp, client, persister)
    return mcp


async def run_server(client: QBittorrentClient) -> None:
    """Serve over stdio until the client disconnects, then log out."""
    mcp = create_server(client)
    logger.info(f"Starting MCP server for {client.config.base_url}")
    async with client:
        await mcp.run_stdio_async()

"""
Command-line interface for qbit-client.

Provides terminal access to a qBittorrent WebUI:
- MCP server over stdio for model clients
- Version info, torrent listing, start/stop
- Recent main log entries

Connection settings default to QBIT_BASE_URL, QBIT_USERNAME, QBIT_PASSWORD
and QBIT_TIMEOUT from the environment (or .env).

Usage:
    qbit-client mcp --base-url http://localhost:8080/api/v2 --username admin --password secret
    qbit-client version
    qbit-client list --filter stopped
    qbit-client start <hash> [<hash> ...]
    qbit-client stop all
    qbit-client log --limit 20
"""

import argparse
import asyncio
import sys
from datetime import datetime

from .client import QBittorrentClient
from .models import LogType, TorrentListOptions
from .utils import format_bytes


async def run_command(args) -> None:
    client = QBittorrentClient(
        base_url=args.base_url,
        username=args.username,
        password=args.password,
        timeout=args.timeout,
    )

    if args.command == "mcp":
        # Imported here so plain commands do not load the MCP SDK
        from .mcp import run_server
        await run_server(client)
        return

    async with client:
        # ---------------------------------------------------------------------
        # Info Commands
        # ---------------------------------------------------------------------

        if args.command == "version":
            app_version = await client.get_application_version()
            api_version = await client.get_api_version()
            print(f"qBittorrent {app_version} (WebUI API {api_version})")

        elif args.command == "log":
            entries = await client.get_log()
            entries = entries[-args.limit:] if args.limit > 0 else entries
            if not entries:
                print("No log entries.")
            for entry in entries:
                stamp = datetime.fromtimestamp(entry.timestamp).strftime("%Y-%m-%d %H:%M:%S")
                try:
                    level = LogType(entry.type).name
                except ValueError:
                    level = str(entry.type)
                print(f"{entry.id:<8} {stamp} {level:<8} {entry.message}")

        # ---------------------------------------------------------------------
        # Torrent Commands
        # ---------------------------------------------------------------------

        elif args.command == "list":
            torrents = await client.get_torrent_list(TorrentListOptions(filter=args.filter))
            if not torrents:
                print("No torrents found.")
            else:
                print(f"{'HASH':<20} {'STATE':<12} {'PROGRESS':<10} {'SIZE':<12} {'NAME'}")
                print("-" * 90)
                for t in torrents:
                    hash_short = t.get("hash", "")[:20]
                    state = t.get("state", "N/A")[:12]
                    progress = f"{t.get('progress', 0) * 100:.1f}%"
                    size = format_bytes(t.get("size", 0))
                    name = t.get("name", "Unknown")[:40]
                    print(f"{hash_short:<20} {state:<12} {progress:<10} {size:<12} {name}")

        elif args.command == "start":
            await client.start_torrents(args.hashes)
            print(f"Started {', '.join(args.hashes)}")

        elif args.command == "stop":
            await client.stop_torrents(args.hashes)
            print(f"Stopped {', '.join(args.hashes)}")


def main():
    parser = argparse.ArgumentParser(
        description="qBittorrent WebUI client and MCP server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s mcp --base-url http://localhost:8080/api/v2 --username admin --password secret
  %(prog)s version
  %(prog)s list --filter downloading
  %(prog)s stop <hash>
  %(prog)s log --limit 20
"""
    )
    parser.add_argument("--base-url", help="WebUI API base URL (default: QBIT_BASE_URL)")
    parser.add_argument("--username", help="WebUI username (default: QBIT_USERNAME)")
    parser.add_argument("--password", help="WebUI password (default: QBIT_PASSWORD)")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds, 0 to disable")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("mcp", help="Run the MCP server over stdio")
    subparsers.add_parser("version", help="Show qBittorrent and WebUI API versions")

    list_parser = subparsers.add_parser("list", help="List torrents")
    list_parser.add_argument("--filter", help="State filter, e.g. downloading, stopped, running")

    start_parser = subparsers.add_parser("start", help="Start torrents")
    start_parser.add_argument("hashes", nargs="+", help="Torrent hashes, or 'all'")

    stop_parser = subparsers.add_parser("stop", help="Stop torrents")
    stop_parser.add_argument("hashes", nargs="+", help="Torrent hashes, or 'all'")

    log_parser = subparsers.add_parser("log", help="Show recent main log entries")
    log_parser.add_argument("--limit", type=int, default=50, help="Number of entries (0 for all)")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    try:
        asyncio.run(run_command(args))
    except KeyboardInterrupt:
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

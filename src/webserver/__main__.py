"""
=============================================================================
WEB SERVER CLI ENTRY POINT
=============================================================================

    # Run with defaults (127.0.0.1:7878, 4 workers)
    python -m webserver

    # More workers, listening everywhere
    python -m webserver --host 0.0.0.0 --workers 8

    # Serve your own hello.html / 404.html, and a shorter /sleep
    python -m webserver --root ./public --sleep 1

Settings come from, highest priority first: these flags, WEBSERVER_*
environment variables (see ServerConfig.from_env), built-in defaults.

=============================================================================
"""

import argparse
import sys
from pathlib import Path

from . import __version__
from .config import LOG_LEVELS, ServerConfig
from .core import PoolError
from .server import WebServer


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser. Unset flags stay None."""
    parser = argparse.ArgumentParser(
        prog="webserver",
        description="Multi-threaded web server backed by a fixed-size thread pool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m webserver                       # Run with defaults
  python -m webserver --port 8080           # Custom port
  python -m webserver --workers 8           # 8 worker threads
  python -m webserver --root ./public       # Serve pages from ./public
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--host", "-H", help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", "-p", type=int, help="Port to listen on (default: 7878)")

    # ─────────────────────────────────────────────────────────────────────
    # POOL ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--workers", "-w",
        type=int,
        help="Number of worker threads, fixed for the server's lifetime (default: 4)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        dest="document_root",
        help="Directory containing hello.html and 404.html"
    )
    parser.add_argument(
        "--sleep",
        dest="sleep_seconds",
        type=float,
        help="Seconds GET /sleep waits before answering (default: 5)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"webserver {__version__}"
    )

    return parser


def load_config(argv=None) -> ServerConfig:
    """Environment/defaults first, then whatever flags were given."""
    args = build_parser().parse_args(argv)
    config = ServerConfig.from_env()

    for name, value in vars(args).items():
        if value is not None:
            setattr(config, name, value)

    config.document_root = Path(config.document_root)
    return config


def main(argv=None):
    """Main CLI entry point."""
    try:
        config = load_config(argv)
        server = WebServer(config)
    except (ValueError, PoolError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

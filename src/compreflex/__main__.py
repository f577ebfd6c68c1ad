"""
=============================================================================
CLI ENTRY POINT
=============================================================================

    # Backend on :45000, restricted to two modules
    python -m compreflex backend --allowed-types math,statistics

    # Facade on :35000, forwarding to a backend elsewhere
    python -m compreflex facade --backend-url http://10.0.0.5:45000

    # Then open http://localhost:35000/cliente

Every flag overrides the matching COMPREFLEX_* environment variable, which
overrides the built-in default (see compreflex.config).

=============================================================================
"""

import argparse
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from . import __version__
from .apps import create_backend, create_facade
from .config import BackendConfig, FacadeConfig, ServerConfig, parse_allowed_types


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="compreflex",
        description="Reflective command gateway: a backend that runs commands and a facade that serves the browser client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m compreflex backend                          # :45000, unrestricted
  python -m compreflex backend --allowed-types math     # only math.*
  python -m compreflex facade --port 8000               # client on :8000/cliente
        """,
    )
    parser.add_argument("--version", "-v", action="version", version=f"compreflex {__version__}")

    roles = parser.add_subparsers(dest="role", metavar="{backend,facade}")
    roles.required = True

    # Flags shared by both roles. Defaults are None so that only flags
    # actually given override the environment.
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--host", "-H", help="Host to bind to (default: 127.0.0.1)")
    common.add_argument("--port", "-p", type=int, help="Port to listen on")
    common.add_argument("--workers", "-w", type=int, help="Worker threads (default: 1, sequential)")
    common.add_argument("--timeout", type=float, help="Socket timeout in seconds (default: 30)")
    common.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    common.add_argument("--log-format", choices=["text", "json"], help="Access log format (default: text)")

    backend = roles.add_parser("backend", parents=[common], help="Run the command-executing backend (default port 45000)")
    backend.add_argument(
        "--allowed-types",
        help="Comma separated modules/classes commands may use (default: unrestricted)",
    )

    facade = roles.add_parser("facade", parents=[common], help="Run the client page and proxy (default port 35000)")
    facade.add_argument("--backend-url", help="Backend base URL (default: http://localhost:45000)")
    facade.add_argument("--backend-timeout", type=float, help="Backend call timeout in seconds (default: 10)")

    return parser


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Environment-derived config for args.role, with the given flags applied on top."""
    if args.role == "backend":
        config = BackendConfig.from_env()
        overrides = {"allowed_types": parse_allowed_types(args.allowed_types)} if args.allowed_types else {}
    else:
        config = FacadeConfig.from_env()
        overrides = {
            name: value
            for name, value in (("backend_url", args.backend_url), ("backend_timeout", args.backend_timeout))
            if value is not None
        }

    for name in ("host", "port", "workers", "timeout", "log_level", "log_format"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value

    config = replace(config, **overrides)
    config.validate()
    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = build_config(args)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    # Early so that startup warnings from create_* are visible
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    server = create_backend(config) if args.role == "backend" else create_facade(config)

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

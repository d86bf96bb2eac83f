"""CLI for the HTTP API server."""

import argparse
import logging

from aiohttp import web

from ..server import create_app
from ..settings import Settings


def main():
    """Main entry point for serve CLI."""
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="Serve the load test API")
    parser.add_argument(
        "--host",
        type=str,
        default=settings.host,
        help=f"Interface to bind (default: {settings.host})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help=f"Port to listen on (default: {settings.port})",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=settings.log_level,
        help=f"Logging level (default: {settings.log_level})",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    logger = logging.getLogger(__name__)
    logger.info(f"Backend server is running on http://{args.host}:{args.port}")

    web.run_app(create_app(settings), host=args.host, port=args.port, print=None)


if __name__ == "__main__":
    main()

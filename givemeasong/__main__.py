"""
GiveMeASong - Entry Point

Run with: python -m givemeasong <song url>
"""

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path

from givemeasong import __version__
from givemeasong.app import GiveMeASongApp
from givemeasong.config import load_settings
from givemeasong.view.song_view import SongView
from givemeasong.workflow.machine import song_path
from givemeasong.workflow.states import Ready


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from third-party libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="givemeasong",
        description="Find a song on every streaming platform from a single link",
    )

    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument(
        "url",
        nargs="?",
        help="Song URL from any supported platform",
    )
    target.add_argument(
        "--song-id",
        help="Show a song by its canonical id instead of resolving a URL",
    )

    parser.add_argument(
        "--api-url",
        help="Backend base URL (overrides config and GIVEMEASONG_API_URL)",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to a TOML settings file",
    )

    parser.add_argument(
        "--locale",
        help="UI language (en, uk)",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser.parse_args(argv)


async def run(app: GiveMeASongApp, url: str | None, song_id: str | None) -> bool:
    """Drive the app to a terminal state, print it and report success."""
    async with app:
        if song_id:
            await app.navigate(song_path(song_id))
        else:
            await app.navigate("/")
            await app.search_view.submit(url or "")

        print(app.render())

        view = app.current_view
        return isinstance(view, SongView) and isinstance(view.workflow.state, Ready)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the application."""
    args = parse_args(argv)
    setup_logging(verbose=args.verbose)

    logger = logging.getLogger(__name__)

    try:
        settings = load_settings(args.config)
        overrides = {}
        if args.api_url:
            overrides["api_base"] = args.api_url
        if args.locale:
            overrides["locale"] = args.locale
        if overrides:
            settings = dataclasses.replace(settings, **overrides)

        ok = asyncio.run(run(GiveMeASongApp(settings), args.url, args.song_id))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        return 1

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())

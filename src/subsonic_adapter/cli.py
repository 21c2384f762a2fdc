# subsonic_adapter/cli.py

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import sys
from typing import Any

import httpx

from subsonic_adapter import config
from subsonic_adapter.api.client import SubsonicClient
from subsonic_adapter.api.errors import SubsonicError
from subsonic_adapter.auth.service import CredentialStore
from subsonic_adapter.domain.models import AlbumSort
from subsonic_adapter.io.serialize import to_json
from subsonic_adapter.io.session_storage import JsonFileStorage

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    """Entry point for the subsonic-adapter CLI."""
    args = _build_arg_parser().parse_args(argv)

    _configure_logging(verbose=args.verbose)

    storage = JsonFileStorage(config.get_session_file())
    auth = CredentialStore(storage, server_url=args.server_url)

    try:
        exit_code = asyncio.run(_dispatch(args, auth))
    except KeyboardInterrupt:
        logger.warning("Interrupted by user. Exiting.")
        sys.exit(1)
    except (SubsonicError, httpx.HTTPError) as exc:
        logger.error("%s", exc)
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="subsonic-adapter",
        description="Query a Subsonic-compatible music server.",
    )

    parser.add_argument(
        "--server-url",
        default=None,
        help="Pin the server URL (overrides the saved one and SUBSONIC_SERVER_URL).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging.",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        help="Sub-command to run.",
    )

    login_parser = subparsers.add_parser("login", help="Log in and remember the session.")
    login_parser.add_argument("--server", required=True, help="Server base URL.")
    login_parser.add_argument("--username", required=True)
    login_parser.add_argument(
        "--password",
        default=None,
        help="Password (prompted for when omitted).",
    )
    login_parser.add_argument(
        "--no-remember",
        action="store_true",
        help="Do not save the session to disk.",
    )

    subparsers.add_parser("logout", help="Forget the saved session.")
    subparsers.add_parser("ping", help="Check the saved session against the server.")
    subparsers.add_parser("genres", help="List genres.")

    albums_parser = subparsers.add_parser("albums", help="List albums.")
    albums_parser.add_argument(
        "--sort",
        choices=[s.value for s in AlbumSort],
        default=AlbumSort.A_Z.value,
        help="Album order (default: %(default)s).",
    )
    albums_parser.add_argument("--size", type=int, default=50)
    albums_parser.add_argument("--offset", type=int, default=0)

    artist_parser = subparsers.add_parser("artist", help="Show artist details.")
    artist_parser.add_argument("id")

    album_parser = subparsers.add_parser("album", help="Show album details.")
    album_parser.add_argument("id")

    search_parser = subparsers.add_parser("search", help="Search artists, albums and tracks.")
    search_parser.add_argument("query")

    subparsers.add_parser("playlists", help="List playlists.")
    playlist_parser = subparsers.add_parser("playlist", help="Show a playlist ('random' for random songs).")
    playlist_parser.add_argument("id")

    subparsers.add_parser("favourites", help="List starred items.")
    subparsers.add_parser("radio", help="List internet radio stations.")
    subparsers.add_parser("podcasts", help="List podcast channels.")
    subparsers.add_parser("scan", help="Start a library scan.")

    return parser


def _configure_logging(*, verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


async def _dispatch(args: argparse.Namespace, auth: CredentialStore) -> int:
    if args.command == "login":
        password = args.password or getpass.getpass("Password: ")
        remember = not args.no_remember
        await auth.login_with_password(
            args.server,
            args.username,
            password,
            remember=remember,
        )
        if remember:
            logger.info("Session saved to %s.", config.get_session_file())
        return 0

    if args.command == "logout":
        auth.logout()
        logger.info("Logged out.")
        return 0

    if not await auth.auto_login():
        logger.error("Not logged in. Run 'subsonic-adapter login' first.")
        return 1

    if args.command == "ping":
        logger.info("Session for %s on %s is valid.", auth.username, auth.server)
        return 0

    async with SubsonicClient(auth) as client:
        result = await _run_query(client, args)

    if result is not None:
        print(to_json(result))
    return 0


async def _run_query(client: SubsonicClient, args: argparse.Namespace) -> Any:
    command = args.command
    if command == "genres":
        return await client.get_genres()
    if command == "albums":
        return await client.get_albums(args.sort, args.size, args.offset)
    if command == "artist":
        return await client.get_artist_details(args.id)
    if command == "album":
        return await client.get_album_details(args.id)
    if command == "search":
        return await client.search(args.query)
    if command == "playlists":
        return await client.get_playlists()
    if command == "playlist":
        return await client.get_playlist(args.id)
    if command == "favourites":
        return await client.get_favourites()
    if command == "radio":
        return await client.get_radio_stations()
    if command == "podcasts":
        return await client.get_podcasts()
    if command == "scan":
        await client.scan()
        logger.info("Library scan started.")
        return None

    msg = f"Unknown command: {command}"
    raise ValueError(msg)


if __name__ == "__main__":
    # python -m subsonic_adapter.cli login --server https://music.example --username me
    # python -m subsonic_adapter.cli -v search "radiohead"
    main()

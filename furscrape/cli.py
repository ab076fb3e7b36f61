"""Command-line entry point for furscrape."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .client import Client
from .config import ClientConfig
from .errors import FurscrapeError, NotLoggedInError
from .images import infer_extension, save_previews
from .models import Journal, Submission

logger = logging.getLogger("furscrape.cli")


def _parse_cookie(value: str) -> Dict[str, str]:
    name, sep, cookie_value = value.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {value!r}")
    return {name: cookie_value}


def _add_client_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--proxy",
        default=None,
        help="HTTP or SOCKS proxy URL (e.g. socks5://127.0.0.1:1080)",
    )
    parser.add_argument(
        "--user-agent",
        default=None,
        help="User-Agent header sent with every request",
    )
    parser.add_argument(
        "--rate-limit",
        type=float,
        default=None,
        help="Minimum seconds between requests",
    )
    parser.add_argument(
        "--cookie",
        action="append",
        type=_parse_cookie,
        default=[],
        metavar="NAME=VALUE",
        help="Session cookie; may be given more than once",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _add_previews_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--previews",
        type=Path,
        default=None,
        help="Directory where preview images of the listed submissions are saved",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Read galleries, journals and search results from the site.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    whoami = subparsers.add_parser("whoami", help="Show the logged-in username")
    _add_client_arguments(whoami)

    recent = subparsers.add_parser("recent", help="A user's latest submissions and journals")
    recent.add_argument("user")
    _add_previews_argument(recent)
    _add_client_arguments(recent)

    gallery = subparsers.add_parser("gallery", help="One page of a user's gallery")
    gallery.add_argument("user")
    gallery.add_argument("--page", type=int, default=1)
    gallery.add_argument(
        "--scraps",
        action="store_true",
        help="List the scraps folder instead of the main gallery",
    )
    _add_previews_argument(gallery)
    _add_client_arguments(gallery)

    journals = subparsers.add_parser("journals", help="One page of a user's journals")
    journals.add_argument("user")
    journals.add_argument("--page", type=int, default=1)
    journals.add_argument(
        "--content",
        action="store_true",
        help="Also fetch and print each journal's body",
    )
    _add_client_arguments(journals)

    search = subparsers.add_parser("search", help="Search submissions")
    search.add_argument("query")
    search.add_argument("--page", type=int, default=1)
    _add_previews_argument(search)
    _add_client_arguments(search)

    view = subparsers.add_parser("view", help="Details of a single submission")
    view.add_argument("submission_id", type=int)
    view.add_argument(
        "--download",
        type=Path,
        default=None,
        help="Directory where the submission file should be written",
    )
    _add_client_arguments(view)

    argv = list(sys.argv[1:] if argv is None else argv)
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ClientConfig:
    """Environment settings, overridden by whatever was passed on the command line."""
    config = ClientConfig.from_env()
    if args.proxy:
        config.proxy = args.proxy
    if args.user_agent:
        config.user_agent = args.user_agent
    if args.rate_limit is not None:
        config.rate_limit = args.rate_limit
    for cookie in args.cookie:
        config.cookies.update(cookie)
    return config


def _print_submissions(submissions: List[Submission]) -> None:
    for submission in submissions:
        print(submission)


def _print_journals(journals: List[Journal], with_content: bool = False) -> None:
    for journal in journals:
        print(journal)
        if with_content:
            print(journal.content())
            print()


def _run(client: Client, args: argparse.Namespace) -> None:
    submissions: List[Submission] = []
    if args.command == "whoami":
        try:
            print(client.get_username())
        except NotLoggedInError:
            logger.warning("Could not determine username; cookies are not logged in")
        return
    if args.command == "recent":
        submissions, journals = client.user(args.user).get_recent()
        _print_submissions(submissions)
        _print_journals(journals)
    elif args.command == "gallery":
        user = client.user(args.user)
        submissions = user.get_scraps(args.page) if args.scraps else user.get_gallery(args.page)
        _print_submissions(submissions)
    elif args.command == "journals":
        _print_journals(client.user(args.user).get_journals(args.page), args.content)
    elif args.command == "search":
        submissions = client.search(args.query).get_page(args.page)
        _print_submissions(submissions)
    elif args.command == "view":
        details = client.get_submission_details(args.submission_id)
        print(f"Download: {details.download_url}")
        print(f"Stats: {details.stats}")
        print(details.description)
        if args.download and details.download_url:
            data = details.download()
            args.download.mkdir(parents=True, exist_ok=True)
            extension = infer_extension(data, details.download_url)
            destination = args.download / f"{details.submission_id}.{extension}"
            destination.write_bytes(data)
            logger.info("Saved submission to %s", destination)

    previews: Optional[Path] = getattr(args, "previews", None)
    if previews and submissions:
        saved = save_previews(submissions, previews.resolve())
        logger.info("Saved %d/%d previews", len(saved), len(submissions))


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    with Client(build_config(args)) as client:
        try:
            _run(client, args)
        except FurscrapeError as exc:
            logger.error("%s", exc)
            sys.exit(1)


if __name__ == "__main__":
    main()

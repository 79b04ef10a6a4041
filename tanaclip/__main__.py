"""CLI entry point: python -m tanaclip (--url URL | --html FILE) [options]"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console

from tanaclip.clipboard import copy_to_clipboard
from tanaclip.compose import compose
from tanaclip.items import CopyResult, OptionsOverride, TanaOptions
from tanaclip.query import FetchError, extract_page, fetch_html
from tanaclip.settings import SettingsStore, get_settings_store

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tanaclip",
        description=(
            "Convert a web page (or a selection of it) into Tana Paste text.\n"
            "Metadata fields come from the page's <meta> tags and byline."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--url", metavar="URL",
                        help="Fetch and clip a live page")
    source.add_argument("--html", metavar="FILE",
                        help="Clip a saved HTML page ('-' reads stdin)")
    parser.add_argument("--page-url", default="", metavar="URL",
                        help="Page URL to record when clipping --html input")

    parser.add_argument("--selector", default=None, metavar="CSS",
                        help="CSS selector whose matches stand in for the selection")
    parser.add_argument("--selection-html", default=None, metavar="FILE",
                        help="File holding the selected HTML fragment")
    parser.add_argument("--selection-text", default=None, metavar="TEXT",
                        help="Plain selection text")

    menu = parser.add_mutually_exclusive_group()
    menu.add_argument("--with-metadata", action="store_true", default=False,
                      help="Include the metadata block for this run")
    menu.add_argument("--selection-only", action="store_true", default=False,
                      help="Leave the metadata block out for this run")

    tag = parser.add_mutually_exclusive_group()
    tag.add_argument("--tag", default=None, metavar="TAG",
                     help="Tag appended to the parent line (default from options)")
    tag.add_argument("--no-tag", action="store_true", default=False,
                     help="Do not tag the parent line")

    parser.add_argument("--keep-empty", action="store_true", default=False,
                        help="Emit metadata fields even when their value is empty")
    parser.add_argument("--lenient", action="store_true", default=False,
                        help="Keep boilerplate and one-character lines in the body")
    parser.add_argument("--config", default=None, metavar="PATH",
                        help="Options file (default: $TANACLIP_CONFIG or "
                             "~/.config/tanaclip/options.yaml)")
    parser.add_argument("--copy", action="store_true", default=False,
                        help="Copy the result to the clipboard")
    parser.add_argument("--quiet", action="store_true", default=False,
                        help="No status notification after copying")
    parser.add_argument("--timeout", type=int, default=30, metavar="SECONDS",
                        help="Network timeout for --url (default: 30)")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        metavar="{DEBUG,INFO,WARNING,ERROR}",
                        help="Logging level (default: WARNING)")
    return parser


def _override_from_args(args: argparse.Namespace) -> OptionsOverride:
    include_metadata: bool | None = None
    if args.with_metadata:
        include_metadata = True
    elif args.selection_only:
        include_metadata = False

    default_tag: str | None = args.tag
    if args.no_tag:
        default_tag = ""

    return OptionsOverride(
        include_metadata=include_metadata,
        default_tag=default_tag,
        omit_empty_metadata=False if args.keep_empty else None,
        strict_filtering=False if args.lenient else None,
        notification_enabled=False if args.quiet else None,
    )


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    # Saved pages are not always UTF-8; undecodable bytes become U+FFFD
    return Path(path).read_bytes().decode("utf-8", errors="replace")


def _notify(console: Console, options: TanaOptions, result: CopyResult) -> None:
    if result.ok:
        logger.info("Copied via %s", result.method)
    else:
        logger.error("Copy failed: %s", result.err)
    if not options.notification_enabled:
        return
    if result.ok:
        console.print("[bold green]Copied to Tana format[/bold green]")
    else:
        console.print("[bold red]Failed to copy to clipboard[/bold red]")


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )
    console = Console(stderr=True)

    store = SettingsStore(args.config) if args.config else get_settings_store()
    options = store.options(_override_from_args(args))

    try:
        selection_html = _read_text(args.selection_html) if args.selection_html else None
        if args.url:
            page_url = args.url
            html = fetch_html(args.url, timeout=args.timeout)
        else:
            page_url = args.page_url
            html = _read_text(args.html)
    except FetchError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as exc:
        print(f"ERROR: Could not read input: {exc}", file=sys.stderr)
        return 1

    record = extract_page(
        html,
        page_url,
        selector=args.selector,
        selection_html=selection_html,
        selection_text=args.selection_text,
    )
    text = compose(record, options)
    print(text)

    if args.copy:
        result = copy_to_clipboard(text)
        _notify(console, options, result)
        if not result.ok:
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

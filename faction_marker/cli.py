"""Command line entry points: watch a live page, check a saved page, manage the stored list."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from logging import Logger
from pathlib import Path
from typing import List, Optional

from .config import MarkerConfig, load_config
from .errors import MarkerError
from .pipeline import MembershipPipeline, open_store
from .store.list_store import ListStore, parse_manual_list
from .utils.logging_setup import cleanup_logger, create_logger

BROWSER_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
]


async def watch_page(url: str, config: MarkerConfig, headless: bool, logger: Logger) -> None:
    """Open url in Chromium and keep the marker in sync until the page is closed."""
    from playwright.async_api import async_playwright

    from .page.page_watcher import HostPageWatcher
    from .page.playwright_document import PlaywrightDocument

    async with async_playwright() as pw:
        browser = await pw.chromium.launch(headless=headless, args=BROWSER_ARGS)
        try:
            context = await browser.new_context(locale='en-US')
            page = await context.new_page()
            try:
                await page.goto(url, wait_until="domcontentloaded", timeout=30000)
            except Exception as e:
                logger.info(f"Navigation timeout/error (continuing): {e}")

            pipeline = MembershipPipeline(config, PlaywrightDocument(page), open_store(config), logger=logger)
            watcher = HostPageWatcher(page, pipeline.trigger, config.marker_ids, logger)

            closed = asyncio.Event()
            page.on("close", lambda _: closed.set())

            await pipeline.start()
            await watcher.start()
            try:
                await closed.wait()
            finally:
                watcher.dispose()
                pipeline.close()
        finally:
            await browser.close()


async def check_snapshot(path: Path, config: MarkerConfig, store: ListStore, logger: Logger):
    """Evaluate a saved HTML page once. Returns (report, annotated html)."""
    from .page.document import SoupDocument

    document = SoupDocument.from_file(path)
    # A snapshot never changes, so there is nothing to wait for
    snapshot_config = config.model_copy(update={"max_wait_s": 0.0})
    pipeline = MembershipPipeline(snapshot_config, document, store, logger=logger)
    try:
        report = await pipeline.start()
    finally:
        pipeline.close()
    return report, document.html


def _read_text(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="faction-marker",
        description="Mark alliance faction members on profile pages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  faction-marker watch "https://www.torn.com/profiles.php?XID=1"
  faction-marker check saved_profile.html --output marked.html
  faction-marker set-manual factions.json
  echo '["The Swarm"]' | faction-marker set-manual -
  faction-marker clear
        """
    )
    parser.add_argument("--config", help="Path to a JSON config file")
    parser.add_argument("--log-dir", help="Write .log/.jsonl files to this folder")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console log level (default: INFO, DEBUG when config.debug is set)"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    watch = sub.add_parser("watch", help="Open a live page and keep the marker in sync")
    watch.add_argument("url")
    watch.add_argument("--headless", action="store_true", help="Run the browser headless")

    check = sub.add_parser("check", help="Evaluate a saved HTML page")
    check.add_argument("html_file")
    check.add_argument("--output", help="Write the marked-up HTML here")

    manual = sub.add_parser("set-manual", help="Store a manual faction list (JSON array; '-' for stdin)")
    manual.add_argument("source")

    sub.add_parser("clear", help="Remove the cached and manual lists")
    sub.add_parser("status", help="Show what is stored")
    return parser


def _status_lines(store: ListStore) -> List[str]:
    manual = store.read_manual_override()
    record = store.read_cache()
    lines = [f"Manual list: {len(manual) if manual else 'none'}"]
    if record is None:
        lines.append("Cache: none")
    else:
        lines.append(
            f"Cache: {len(record.raw_list)} factions, {store.cache_age_s(record) / 3600:.1f}h old"
        )
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except MarkerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.log_level:
        console_level = getattr(logging, args.log_level)
    else:
        console_level = logging.DEBUG if config.debug else logging.INFO
    logger, _ = create_logger("faction_marker", args.log_dir, console_level=console_level)

    try:
        store = open_store(config)

        if args.command == "watch":
            asyncio.run(watch_page(args.url, config, args.headless, logger))

        elif args.command == "check":
            report, marked_html = asyncio.run(
                check_snapshot(Path(args.html_file), config, store, logger)
            )
            print(f"Faction: {report.identity or '(not found)'}")
            print(f"Member: {report.matched}")
            print(f"Inserted: {report.placement}")
            if args.output:
                Path(args.output).write_text(marked_html, encoding="utf-8")

        elif args.command == "set-manual":
            raw_list = parse_manual_list(_read_text(args.source))
            store.write_manual_override(raw_list)
            print(f"Manual list saved: {len(raw_list)} factions")

        elif args.command == "clear":
            store.clear_all()
            print("Caches cleared.")

        elif args.command == "status":
            print("\n".join(_status_lines(store)))

    except (MarkerError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        cleanup_logger(logger)

    return 0


def cli_main() -> int:
    return main()


if __name__ == "__main__":
    sys.exit(cli_main())

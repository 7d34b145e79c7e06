"""
main.py — Single entry point.

Two modes:

  python main.py https://competitor.example/product [--timeout 10] [--report]
      Extract one competitor and print the record as JSON.

  python main.py --serve
      Run the JSON API (api_server.py) until Ctrl+C / SIGTERM.

Exit codes (extract mode):
  0  record printed (possibly degraded)
  1  every text provider failed / none configured
  2  invalid URL or arguments
"""
import argparse
import asyncio
import json
import logging
import signal
import sys

import config
from competitor_pipeline import run_pipeline_report
from providers.base import ProviderUnavailableError
from scraper.base import FetchOptions

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract structured competitor data from a product URL.",
    )
    parser.add_argument("url", nargs="?", help="Competitor product page URL")
    parser.add_argument(
        "--timeout",
        type=float,
        default=config.FETCH_TIMEOUT,
        help="Page fetch timeout in seconds",
    )
    parser.add_argument(
        "--skip-tier2",
        action="store_true",
        default=config.SKIP_TIER2,
        help="Never escalate to a full-browser fetcher",
    )
    parser.add_argument(
        "--report",
        action="store_true",
        help="Print per-stage status alongside the record",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the HTTP API instead of extracting a single URL",
    )
    return parser


async def extract(url: str, options: FetchOptions, with_report: bool) -> dict:
    report = await run_pipeline_report(url, options)
    return report.to_dict() if with_report else report.record.to_dict()


async def serve() -> None:
    from api_server import start_api_server

    runner = await start_api_server()
    stop_event = asyncio.Event()

    def _stop(*_):
        logger.info("Shutdown signal received.")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _stop)
        except (NotImplementedError, RuntimeError):
            # Windows doesn't support add_signal_handler for all signals
            pass

    try:
        await stop_event.wait()
    finally:
        await runner.cleanup()
        logger.info("API server stopped.")


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging()

    if args.serve:
        try:
            asyncio.run(serve())
        except KeyboardInterrupt:
            pass
        return 0

    if not args.url:
        parser.print_usage(sys.stderr)
        print("error: a URL is required unless --serve is given", file=sys.stderr)
        return 2

    try:
        options = FetchOptions(timeout=args.timeout, skip_tier2=args.skip_tier2)
        result = asyncio.run(extract(args.url, options, args.report))
    except ValueError as exc:       # InvalidURLError or a non-positive --timeout
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except ProviderUnavailableError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""CLI argument parsing and command entry points."""

import asyncio
import logging
import os
import sys
from typing import List, Optional

from .classifier import classify, extract_candidates
from .errors import TrackingError
from .models import TrackingResult

logger = logging.getLogger(__name__)


def _print_timeline(code: str, result: TrackingResult) -> None:
    print(f"{code}  {result.carrier.display_name}  {result.status.display_name}")
    for event in result.events:
        location = f" ({event.location})" if event.location else ""
        print(f"  {event.date.isoformat()}  [{event.status.value}] {event.description}{location}")


def _cmd_classify(args) -> int:
    guess = classify(args.code)
    print(f"{guess.code}\t{guess.carrier.value}")
    return 0


def _captured_codes_store(settings):
    from .snapshots import JsonFileSnapshotStore

    return JsonFileSnapshotStore(settings.snapshot_dir) if settings.snapshot_dir else JsonFileSnapshotStore()


def _cmd_extract(args) -> int:
    if args.source == "-":
        text = sys.stdin.read()
    else:
        with open(args.source, "r", encoding="utf-8") as f:
            text = f.read()
    codes = sorted(extract_candidates(text))
    for code in codes:
        print(f"{code}\t{classify(code).carrier.value}")

    if args.capture:
        from .config import load_settings
        from .orders import OrderBook

        settings = load_settings(args.config)
        store = _captured_codes_store(settings)
        book = OrderBook.load(args.orders, captured_codes=store) if args.orders else OrderBook(captured_codes=store)
        added = book.capture_codes(codes)
        print(f"captured {len(added)} new codes", file=sys.stderr)
    return 0


async def _track(args) -> int:
    from .config import load_settings
    from .providers import TrackingProviderFactory

    settings = load_settings(args.config)
    provider = TrackingProviderFactory.create_provider(settings, strict=args.strict)
    guess = classify(args.code)
    result = await provider.fetch_tracking(guess.code, carrier_hint=guess.carrier)
    _print_timeline(guess.code, result)
    return 0


async def _refresh(args) -> int:
    from .config import load_settings
    from .notifications import LoggingNotifier
    from .orchestrator import TrackingOrchestrator
    from .orders import OrderBook
    from .providers import TrackingProviderFactory
    from .snapshots import JsonFileSnapshotStore

    settings = load_settings(args.config)
    if args.pending and not settings.background_refresh_enabled:
        logger.info("Background refresh disabled, skipping pending batch")
        print("background refresh disabled, nothing to do", file=sys.stderr)
        return 0

    book = OrderBook.load(args.orders, captured_codes=_captured_codes_store(settings))
    sink = JsonFileSnapshotStore(settings.snapshot_dir) if settings.snapshot_dir else None
    orchestrator = TrackingOrchestrator(
        TrackingProviderFactory.create_provider(settings, strict=args.strict),
        snapshot_sink=sink,
        notifier=LoggingNotifier(enabled=settings.notifications_enabled),
        max_concurrency=settings.max_concurrency,
    )

    if args.import_captured:
        for order in book.import_captured_codes():
            print(f"{order.id}\timported {order.tracking_code}")

    orders = book.list()
    if args.pending:
        report = await orchestrator.refresh_pending(orders, limit=settings.background_batch_limit)
    else:
        report = await orchestrator.refresh_many(orders)
    book.save(args.orders)

    for outcome in report.changed:
        print(f"{outcome.order_id}\t{outcome.old_status.value} -> {outcome.new_status.value}")
    for error in report.errors:
        print(f"{error.order_id}\tFAILED: {error.cause}", file=sys.stderr)
    return 1 if report.errors else 0


def main(argv: Optional[List[str]] = None) -> int:
    import argparse

    parser = argparse.ArgumentParser(prog="cargotrack", description="Package tracking toolkit")
    parser.add_argument("--log-level", default=os.getenv("CARGOTRACK_LOG_LEVEL", "WARNING"))
    sub = parser.add_subparsers(dest="command", required=True)

    p_classify = sub.add_parser("classify", help="Guess the carrier of a tracking code")
    p_classify.add_argument("code")
    p_classify.set_defaults(func=_cmd_classify)

    p_extract = sub.add_parser("extract", help="Find tracking codes in free text")
    p_extract.add_argument("source", help="Text file, or - for stdin")
    p_extract.add_argument("--capture", action="store_true", help="Record new codes for later import")
    p_extract.add_argument("--orders", help="Order book JSON file; codes it already tracks are not captured")
    p_extract.add_argument("--config", default=os.getenv("CARGOTRACK_CONFIG"))
    p_extract.set_defaults(func=_cmd_extract)

    p_track = sub.add_parser("track", help="Fetch and print a tracking timeline")
    p_track.add_argument("code")
    p_track.add_argument("--config", default=os.getenv("CARGOTRACK_CONFIG"))
    p_track.add_argument("--strict", action="store_true", help="Fail instead of falling back to simulated data")
    p_track.set_defaults(func=lambda a: asyncio.run(_track(a)))

    p_refresh = sub.add_parser("refresh", help="Refresh orders stored in a JSON file")
    p_refresh.add_argument("--orders", required=True, help="Order book JSON file")
    p_refresh.add_argument("--config", default=os.getenv("CARGOTRACK_CONFIG"))
    p_refresh.add_argument("--pending", action="store_true", help="Only a bounded batch of undelivered orders")
    p_refresh.add_argument("--import-captured", action="store_true", help="Create orders for captured codes first")
    p_refresh.add_argument("--strict", action="store_true")
    p_refresh.set_defaults(func=lambda a: asyncio.run(_refresh(a)))

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(levelname)s: %(name)s - %(message)s",
    )

    try:
        return args.func(args)
    except (TrackingError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

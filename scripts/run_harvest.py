"""
Run a structured-data harvest from CLI.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from db.session import SessionLocal, init_schema
from harvester.config import configure_logging
from harvester.schemas.run_input import RunInput, load_run_input, parse_run_input
from harvester.scraping.config import get_harvest_settings
from harvester.scraping.errors import ConfigurationError
from harvester.scraping.storage import (
    FanOutResultStorage,
    JsonLinesResultStorage,
    MemoryResultStorage,
    ResultStorage,
    SQLAlchemyResultStorage,
)
from harvester.services.harvest_service import HarvestService


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Harvest JSON-LD entities from a list of URLs.")
    parser.add_argument("--input", dest="input_path", default=None, help="Run input JSON file.")
    parser.add_argument(
        "--url",
        dest="urls",
        action="append",
        default=[],
        help="URL to harvest; repeatable. Replaces startUrls from --input.",
    )
    parser.add_argument("--output", default=None, help="JSON Lines file for result records.")
    parser.add_argument("--stats-output", default=None, help="JSON file for the run summary.")
    parser.add_argument(
        "--database",
        action="store_true",
        help="Also persist results to the configured database.",
    )
    parser.add_argument("--concurrency", type=int, default=None)
    parser.add_argument("--session-pages", type=int, default=None)
    parser.add_argument("--timeout", type=float, default=None, help="Per-attempt timeout seconds.")
    parser.add_argument("--delay-min-ms", type=int, default=None)
    parser.add_argument("--delay-max-ms", type=int, default=None)
    parser.add_argument("--log-level", default=None)
    return parser


def _build_run_input(args: argparse.Namespace) -> RunInput:
    payload: dict[str, Any] = {}
    if args.input_path:
        payload = load_run_input(args.input_path).model_dump(by_alias=True, exclude_none=True)
    if args.urls:
        payload["startUrls"] = [{"url": url} for url in args.urls]
        payload.pop("url", None)
    overrides = {
        "concurrency": args.concurrency,
        "sessionPages": args.session_pages,
        "timeoutSecs": args.timeout,
        "delayMsMin": args.delay_min_ms,
        "delayMsMax": args.delay_max_ms,
    }
    payload.update({key: value for key, value in overrides.items() if value is not None})
    return parse_run_input(payload)


def _build_storage(args: argparse.Namespace) -> ResultStorage:
    storages: list[ResultStorage] = []
    if args.output:
        storages.append(JsonLinesResultStorage(args.output, stats_path=args.stats_output))
    if args.database:
        init_schema()
        storages.append(
            SQLAlchemyResultStorage(
                session_factory=SessionLocal,
                batch_size=get_harvest_settings().storage_batch_size,
            )
        )
    if not storages:
        return MemoryResultStorage()
    if len(storages) == 1:
        return storages[0]
    return FanOutResultStorage(storages)


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        run_input = _build_run_input(args)
        storage = _build_storage(args)
        report = HarvestService().run(run_input, storage=storage)
    except ConfigurationError as exc:
        print(json.dumps({"error": str(exc), "kind": exc.kind.value}), file=sys.stderr)
        return 2

    print(json.dumps(report.stats.to_record(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

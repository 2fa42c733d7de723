from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Optional, Sequence

from codestats.config import SyncSettings
from codestats.errors import StorageFailure, SyncAborted, UserNotFound
from codestats.logging_config import configure_logging
from codestats.sync import ProfileSyncService


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True))


def run_sync(service: ProfileSyncService, user_id: str) -> None:
    profile = service.sync_user_stats(user_id)

    ok = 0
    fail = 0
    for platform, slot in sorted(profile.platforms.items()):
        error = slot.get("fetch_error")
        if error:
            fail += 1
        else:
            ok += 1
        print(f"platform={platform} fetched_at={slot.get('last_fetched_at')} error={error}")

    snapshot = service.metrics.snapshot(window_secs=300)
    if snapshot.total_fetches:
        print(f"avg_latency_ms={snapshot.avg_latency_ms:.0f} timeouts={snapshot.timeout_count}")
    print(f"\nDONE: success={ok} fail={fail} total_solved={profile.aggregated_stats.total_problems_solved}")
    _print_json(profile.to_dict())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Aggregate coding-platform stats for a user")
    parser.add_argument("--data-dir", default=None, help="Directory holding users/, profiles/ and submissions/")
    parser.add_argument("--log-level", default=None, help="Logging level (default from CODESTATS_LOG_LEVEL)")
    parser.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds")
    parser.add_argument("--qps", type=float, default=None, help="Max requests per second per platform")
    parser.add_argument("--max-workers", type=int, default=None, help="Concurrent platform fetches")
    parser.add_argument("--max-retries", type=int, default=None, help="Retries on transient network errors")

    sub = parser.add_subparsers(dest="command", required=True)
    for name, help_text in (
        ("sync", "Fetch every connected platform and store the merged profile"),
        ("stats", "Show local and external stats"),
        ("achievements", "Show streak and achievements"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("user_id")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = SyncSettings.from_env()
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    settings = settings.with_overrides(
        data_dir=args.data_dir,
        log_level=args.log_level.upper() if args.log_level else None,
        request_timeout=args.timeout,
        qps=args.qps,
        max_workers=args.max_workers,
        max_retries=args.max_retries,
    )
    configure_logging(settings.log_level)

    service = ProfileSyncService.from_settings(settings)
    try:
        if args.command == "sync":
            run_sync(service, args.user_id)
        elif args.command == "stats":
            _print_json(service.get_stats(args.user_id))
        else:
            _print_json(service.get_achievements(args.user_id))
    except (UserNotFound, StorageFailure, SyncAborted) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        service.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())

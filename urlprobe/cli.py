from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from urlprobe.checks.results import CheckResult
from urlprobe.config import settings
from urlprobe.errors import ConfigError
from urlprobe.formatting import format_summary
from urlprobe.models import ProbeConfig
from urlprobe.registry import config_from_urls, load_config
from urlprobe.runner import exit_code, loop_forever, run_once, summarize

logger = logging.getLogger("urlprobe")

CONFIG_ERROR_EXIT = 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="urlprobe",
        description="Fetch a list of URLs and check that each returns the expected status.",
    )
    p.add_argument("urls", nargs="*", help="URLs to probe (overrides the config file's list)")
    p.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help=f"YAML config file (default: {settings.URLPROBE_CONFIG_PATH} when no URLs are given)",
    )
    p.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds")
    p.add_argument("--concurrency", type=int, default=None, help="Probes run in parallel")
    p.add_argument(
        "--total-timeout", type=float, default=None, help="Deadline for the whole run in seconds"
    )
    p.add_argument(
        "--expect",
        type=int,
        action="append",
        default=None,
        metavar="STATUS",
        help="Accepted status code (repeatable, default 200)",
    )
    p.add_argument("--json", action="store_true", help="Print results as JSON on stdout")
    p.add_argument(
        "--interval",
        type=int,
        default=settings.URLPROBE_INTERVAL,
        help="Repeat every N seconds (0 runs once)",
    )
    p.add_argument("--log-level", default=settings.LOG_LEVEL)
    return p


def resolve_config(args: argparse.Namespace) -> ProbeConfig:
    if args.config is not None or not args.urls:
        path = args.config or Path(settings.URLPROBE_CONFIG_PATH)
        try:
            cfg = load_config(path)
        except FileNotFoundError as e:
            raise ConfigError(str(e)) from e
        data = cfg.model_dump(exclude_unset=True)
    else:
        data = {}

    if args.urls:
        data["urls"] = list(args.urls)
    if args.timeout is not None or args.expect:
        defaults = dict(data.get("defaults") or {})
        if args.timeout is not None:
            defaults["timeout_s"] = args.timeout
        if args.expect:
            defaults["expected_status"] = args.expect
        data["defaults"] = defaults

    overrides = {"concurrency": args.concurrency, "total_timeout_s": args.total_timeout}
    data.update({k: v for k, v in overrides.items() if v is not None})
    return config_from_urls(data.pop("urls", []), **data)


def report(results: list[CheckResult], as_json: bool = False) -> None:
    summary = summarize(results)
    if as_json:
        json.dump([r.to_dict() for r in results], sys.stdout, indent=2)
        sys.stdout.write("\n")
    logger.info(format_summary(summary))


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = resolve_config(args)
    except ConfigError as e:
        print(f"urlprobe: {e}", file=sys.stderr)
        return CONFIG_ERROR_EXIT

    if args.interval > 0:
        loop_forever(cfg, args.interval, on_results=lambda rs: report(rs, args.json))
        return 0

    results = run_once(cfg)
    report(results, args.json)
    return exit_code(results)


if __name__ == "__main__":
    raise SystemExit(main())

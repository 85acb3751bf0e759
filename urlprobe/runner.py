from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable

from urlprobe.checks.checkers import build_checkers
from urlprobe.checks.http_check import run_http
from urlprobe.checks.results import CheckResult
from urlprobe.formatting import format_result
from urlprobe.models import ProbeConfig
from urlprobe.registry import apply_defaults

logger = logging.getLogger(__name__)

MAX_EXIT_CODE = 255


def _probe(target: dict) -> CheckResult:
    return run_http(
        target["url"],
        timeout_s=target["timeout_s"],
        checkers=build_checkers(target),
        connect_timeout_s=target.get("connect_timeout_s"),
    )


def _log_result(res: CheckResult) -> None:
    if res.passed:
        logger.info(format_result(res))
    else:
        logger.warning(format_result(res))


def run_once(cfg: ProbeConfig) -> list[CheckResult]:
    targets = apply_defaults(cfg)

    pool = ThreadPoolExecutor(max_workers=min(cfg.concurrency, len(targets)))
    try:
        futures: list[Future[CheckResult]] = [pool.submit(_probe, t) for t in targets]
        _, pending = wait(futures, timeout=cfg.total_timeout_s)
    finally:
        # Outstanding probes are bounded by their own request timeout.
        pool.shutdown(wait=False, cancel_futures=True)

    results: list[CheckResult] = []
    for target, fut in zip(targets, futures):
        if fut in pending:
            res = CheckResult(
                url=target["url"],
                passed=False,
                error=f"total timeout of {cfg.total_timeout_s}s exceeded",
                error_kind="network_error",
            )
        else:
            try:
                res = fut.result()
            except Exception as e:
                logger.exception("probe for %s raised", target["url"])
                res = CheckResult(
                    url=target["url"],
                    passed=False,
                    error=f"unexpected error: {e}",
                    error_kind="check_failed",
                )
        _log_result(res)
        results.append(res)

    return results


def summarize(results: list[CheckResult]) -> dict[str, Any]:
    failed = [r for r in results if not r.passed]
    return {
        "total": len(results),
        "passed": len(results) - len(failed),
        "failed": len(failed),
        "network_errors": sum(1 for r in failed if r.error_kind == "network_error"),
        "check_failures": sum(1 for r in failed if r.error_kind == "check_failed"),
        "failed_urls": [r.url for r in failed],
    }


def exit_code(results: list[CheckResult]) -> int:
    return min(sum(1 for r in results if not r.passed), MAX_EXIT_CODE)


def loop_forever(
    cfg: ProbeConfig,
    interval_s: int,
    on_results: Callable[[list[CheckResult]], None] | None = None,
) -> None:
    while True:
        start = time.perf_counter()
        results = run_once(cfg)
        if on_results is not None:
            on_results(results)
        elapsed = time.perf_counter() - start
        sleep_s = max(0.0, interval_s - elapsed)
        time.sleep(sleep_s)

from __future__ import annotations

import logging
import time
from typing import Iterable

import requests

from urlprobe.checks.checkers import Checker, StatusChecker, evaluate
from urlprobe.checks.results import CheckResult
from urlprobe.errors import CheckFailed, NetworkError

logger = logging.getLogger(__name__)


def fetch(url: str, timeout_s: float, connect_timeout_s: float | None = None) -> requests.Response:
    connect_timeout = timeout_s if connect_timeout_s is None else connect_timeout_s
    try:
        return requests.get(url, timeout=(connect_timeout, timeout_s))
    except Exception as e:
        raise NetworkError(url, str(e)) from e


def run_http(
    url: str,
    timeout_s: float,
    checkers: Iterable[Checker] | None = None,
    connect_timeout_s: float | None = None,
) -> CheckResult:
    checkers = list(checkers) if checkers is not None else [StatusChecker()]
    start = time.perf_counter()
    try:
        r = fetch(url, timeout_s, connect_timeout_s=connect_timeout_s)
        latency_ms = int((time.perf_counter() - start) * 1000)
        evaluate(url, checkers, r)
        return CheckResult(url=url, passed=True, status=r.status_code, latency_ms=latency_ms)
    except NetworkError as e:
        latency_ms = int((time.perf_counter() - start) * 1000)
        logger.debug("probe %s could not complete: %s", url, e.message)
        return CheckResult(
            url=url, passed=False, error=e.message, error_kind=e.kind, latency_ms=latency_ms
        )
    except CheckFailed as e:
        return CheckResult(
            url=url,
            passed=False,
            status=e.status_code,
            error=e.message,
            error_kind=e.kind,
            latency_ms=latency_ms,
        )

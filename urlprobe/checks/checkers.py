"""
Response checkers.

A checker is a predicate over a ``requests.Response``. The runner only ever
calls ``check`` and ``describe``, so new kinds of checks can be added here
without touching the probe loop.
"""
from __future__ import annotations

import re
from typing import Any, Iterable, Protocol

import requests

from urlprobe.errors import CheckFailed


class Checker(Protocol):
    def check(self, response: requests.Response) -> bool: ...

    def describe(self, response: requests.Response) -> str: ...


class StatusChecker:
    def __init__(self, expected: Iterable[int] = (200,)) -> None:
        self.expected = frozenset(expected)

    def check(self, response: requests.Response) -> bool:
        return response.status_code in self.expected

    def describe(self, response: requests.Response) -> str:
        wanted = ", ".join(str(code) for code in sorted(self.expected))
        return f"status {response.status_code} not in [{wanted}]"


class BodyRegexChecker:
    def __init__(self, pattern: str, must_match: bool = True) -> None:
        self.pattern = re.compile(pattern)
        self.must_match = must_match

    def check(self, response: requests.Response) -> bool:
        found = self.pattern.search(response.text or "") is not None
        return found if self.must_match else not found

    def describe(self, response: requests.Response) -> str:
        if self.must_match:
            return f"body does not match /{self.pattern.pattern}/"
        return f"body matches /{self.pattern.pattern}/"


class HeaderRegexChecker:
    def __init__(self, header: str, pattern: str, allow_missing: bool = False) -> None:
        self.header = header
        self.pattern = re.compile(pattern)
        self.allow_missing = allow_missing

    def check(self, response: requests.Response) -> bool:
        value = response.headers.get(self.header)
        if value is None:
            return self.allow_missing
        return self.pattern.search(value) is not None

    def describe(self, response: requests.Response) -> str:
        value = response.headers.get(self.header)
        if value is None:
            return f"header {self.header} missing"
        return f"header {self.header}={value!r} does not match /{self.pattern.pattern}/"


class LatencyChecker:
    def __init__(self, max_ms: int) -> None:
        self.max_ms = max_ms

    def _elapsed_ms(self, response: requests.Response) -> int:
        return int(response.elapsed.total_seconds() * 1000)

    def check(self, response: requests.Response) -> bool:
        return self._elapsed_ms(response) <= self.max_ms

    def describe(self, response: requests.Response) -> str:
        return f"exceeded latency limit of {self.max_ms} ms"


def build_checkers(target: dict[str, Any]) -> list[Checker]:
    checkers: list[Checker] = [StatusChecker(target.get("expected_status") or (200,))]
    for pattern in target.get("body_matches") or []:
        checkers.append(BodyRegexChecker(pattern, must_match=True))
    for pattern in target.get("body_not_matches") or []:
        checkers.append(BodyRegexChecker(pattern, must_match=False))
    for hm in target.get("header_matches") or []:
        checkers.append(
            HeaderRegexChecker(hm["header"], hm["regexp"], hm.get("allow_missing", False))
        )
    if target.get("max_latency_ms"):
        checkers.append(LatencyChecker(target["max_latency_ms"]))
    return checkers


def evaluate(url: str, checkers: Iterable[Checker], response: requests.Response) -> None:
    for checker in checkers:
        if not checker.check(response):
            raise CheckFailed(url, checker.describe(response), status_code=response.status_code)

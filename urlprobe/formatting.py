from __future__ import annotations

from typing import Any, Dict

from urlprobe.checks.results import CheckResult


def format_result(result: CheckResult) -> str:
    label = "PASS" if result.passed else "FAIL"
    details = []
    if result.status is not None:
        details.append(str(result.status))
    details.append(f"{result.latency_ms} ms")
    line = f"[{label}] {result.url} ({', '.join(details)})"
    if result.error:
        line += f": {result.error}"
    return line


def format_summary(summary: Dict[str, Any]) -> str:
    lines = [f"{summary['passed']}/{summary['total']} checks passed"]
    if summary["failed"]:
        lines.append(
            f"{summary['failed']} failed "
            f"({summary['check_failures']} check, {summary['network_errors']} network)"
        )
        lines.extend(f"  - {url}" for url in summary["failed_urls"])
    return "\n".join(lines)

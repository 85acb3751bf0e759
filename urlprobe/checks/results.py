from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

ErrorKind = Literal["network_error", "check_failed"]


@dataclass
class CheckResult:
    url: str
    passed: bool
    status: int | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    # Timing varies run to run; it must not affect equality.
    latency_ms: int = field(default=0, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

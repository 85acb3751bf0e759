from __future__ import annotations

from typing import Any, List, Optional

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from urlprobe.config import settings

_http_url = TypeAdapter(AnyHttpUrl)


class HeaderMatch(BaseModel):
    header: str = Field(..., min_length=1)
    regexp: str
    allow_missing: bool = False


class Defaults(BaseModel):
    timeout_s: float = Field(default_factory=lambda: settings.URLPROBE_TIMEOUT_S, gt=0)
    expected_status: List[int] = Field(default_factory=lambda: [200], min_length=1)


class Target(BaseModel):
    # Kept verbatim so results can be matched against the configured string.
    url: str
    timeout_s: Optional[float] = Field(default=None, gt=0)
    connect_timeout_s: Optional[float] = Field(default=None, gt=0)
    expected_status: Optional[List[int]] = Field(default=None, min_length=1)
    body_matches: List[str] = Field(default_factory=list)
    body_not_matches: List[str] = Field(default_factory=list)
    header_matches: List[HeaderMatch] = Field(default_factory=list)
    max_latency_ms: Optional[int] = Field(default=None, ge=1)

    @field_validator("url")
    @classmethod
    def _absolute_http_url(cls, v: str) -> str:
        if v != v.strip():
            raise ValueError(f"URL has surrounding whitespace: {v!r}")
        try:
            _http_url.validate_python(v)
        except ValidationError as e:
            raise ValueError(f"not an absolute http(s) URL: {v!r}") from e
        return v


class ProbeConfig(BaseModel):
    defaults: Defaults = Field(default_factory=Defaults)
    concurrency: int = Field(default_factory=lambda: settings.URLPROBE_CONCURRENCY, ge=1)
    total_timeout_s: Optional[float] = Field(
        default_factory=lambda: settings.URLPROBE_TOTAL_TIMEOUT_S, gt=0
    )
    urls: List[Target] = Field(..., min_length=1)

    @field_validator("urls", mode="before")
    @classmethod
    def _accept_bare_strings(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [{"url": item} if isinstance(item, str) else item for item in v]
        return v

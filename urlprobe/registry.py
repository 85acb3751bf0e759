from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import yaml
from pydantic import ValidationError

from urlprobe.config import settings
from urlprobe.errors import ConfigError
from urlprobe.models import ProbeConfig

CONFIG_PATH = Path(settings.URLPROBE_CONFIG_PATH)


def _validate(data: Any, source: str) -> ProbeConfig:
    try:
        return ProbeConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid probe config in {source}:\n{e}") from e


def load_config(path: Path = CONFIG_PATH) -> ProbeConfig:
    if not path.exists():
        raise FileNotFoundError(f"Missing probe config at {path}")

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping with a 'urls' list")

    return _validate(data, str(path))


def config_from_urls(urls: Iterable[str], **overrides: Any) -> ProbeConfig:
    data: dict[str, Any] = {"urls": list(urls)}
    data.update({k: v for k, v in overrides.items() if v is not None})
    return _validate(data, "command line")


def apply_defaults(cfg: ProbeConfig) -> list[dict]:
    """
    Resolve every target against the config defaults.
    Returns plain dicts in input order; duplicate URLs are kept as separate targets.
    """
    out: list[dict] = []
    d = cfg.defaults

    for t in cfg.urls:
        td = t.model_dump()
        td["timeout_s"] = td["timeout_s"] or d.timeout_s
        td["expected_status"] = td["expected_status"] or list(d.expected_status)
        out.append(td)

    return out

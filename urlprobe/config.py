import os
from dotenv import load_dotenv

load_dotenv()


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return float(raw)


class Settings:
    URLPROBE_CONFIG_PATH: str = os.getenv("URLPROBE_CONFIG_PATH", "urls.yml")
    URLPROBE_TIMEOUT_S: float = float(os.getenv("URLPROBE_TIMEOUT_S", "3"))
    URLPROBE_CONCURRENCY: int = int(os.getenv("URLPROBE_CONCURRENCY", 1))
    URLPROBE_TOTAL_TIMEOUT_S: float | None = _optional_float("URLPROBE_TOTAL_TIMEOUT_S")
    URLPROBE_INTERVAL: int = int(os.getenv("URLPROBE_INTERVAL", 0))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()

import logging
import os

_TRUTHY = ("1", "true", "yes", "on")


class Config:
    def __init__(self):
        self.API_BASE_ROUTE: str = os.environ.get("API_BASE_ROUTE", "")
        self.API_TOKEN: str = os.environ.get("API_TOKEN", "")
        self.API_TIMEOUT: float = float(os.environ.get("API_TIMEOUT", "30"))
        self.API_MAX_WORKERS: int = int(os.environ.get("API_MAX_WORKERS", "4"))
        self.API_STRICT: bool = os.environ.get("API_STRICT", "").strip().lower() in _TRUTHY
        self.LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()

    def validate(self):
        if self.API_TIMEOUT <= 0:
            raise ValueError(f"API_TIMEOUT must be positive, got {self.API_TIMEOUT}")
        if self.API_MAX_WORKERS <= 0:
            raise ValueError(f"API_MAX_WORKERS must be positive, got {self.API_MAX_WORKERS}")


def setup_logging(level: str | None = None):
    logging.basicConfig(
        level=(level or cfg.LOG_LEVEL).upper(),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )


cfg = Config()

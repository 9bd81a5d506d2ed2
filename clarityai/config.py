import os
from dataclasses import dataclass, field
from typing import Optional, Tuple


DEFAULT_MODEL = "deepseek-chat"
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_MAX_RETRIES = 2
DEFAULT_BACKOFF_SECONDS = 1.0
DEFAULT_HIRO_API_URL = "https://api.mainnet.hiro.so"
DEFAULT_CORS_ORIGINS = "*"
DEFAULT_LOG_LEVEL = "INFO"


def _split_origins(raw: str) -> Tuple[str, ...]:
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, resolved once at start-up."""

    api_key: Optional[str] = None
    api_url: Optional[str] = None
    model: str = DEFAULT_MODEL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_seconds: float = DEFAULT_BACKOFF_SECONDS
    hiro_api_url: str = DEFAULT_HIRO_API_URL
    cors_origins: Tuple[str, ...] = field(default=(DEFAULT_CORS_ORIGINS,))
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_url)

    @classmethod
    def from_env(cls) -> "Settings":
        # Missing credentials are not an error here; the gateway refuses to call out instead.
        return cls(
            api_key=os.environ.get("DEEPSEEK_API_KEY") or None,
            api_url=os.environ.get("DEEPSEEK_API_URL") or None,
            model=os.environ.get("DEEPSEEK_MODEL", DEFAULT_MODEL),
            timeout_seconds=float(os.environ.get("DEEPSEEK_TIMEOUT", DEFAULT_TIMEOUT_SECONDS)),
            max_retries=int(os.environ.get("DEEPSEEK_MAX_RETRIES", DEFAULT_MAX_RETRIES)),
            backoff_seconds=float(os.environ.get("DEEPSEEK_BACKOFF_SECONDS", DEFAULT_BACKOFF_SECONDS)),
            hiro_api_url=os.environ.get("HIRO_API_URL", DEFAULT_HIRO_API_URL).rstrip("/"),
            cors_origins=_split_origins(os.environ.get("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)),
            log_level=os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )

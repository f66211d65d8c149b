# cyberrank_e2e/utils/config.py
from __future__ import annotations

import functools
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# ---------- Enums ----------

class BrowserType(str, Enum):
    chromium = "chromium"
    firefox = "firefox"
    webkit = "webkit"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# ---------- Settings ----------

class Settings(BaseSettings):
    """
    Central configuration for the CyberRank end-to-end suite.

    Values load in this order of precedence:
      1) Environment variables
      2) .env file in project root
      3) Defaults below
    """

    # ---- Target application ----
    BASE_URL: str = Field(default="https://www.cyberrank.ai", description="Application root URL")

    # ---- Browser configuration ----
    HEADLESS: bool = Field(default=True, description="Run the browser headless")
    BROWSER_TYPE: BrowserType = Field(default=BrowserType.chromium, description="Playwright browser")
    VIEWPORT_WIDTH: int = Field(default=1920, ge=320, le=7680)
    VIEWPORT_HEIGHT: int = Field(default=1080, ge=320, le=4320)
    SLOW_MO: int = Field(default=0, ge=0, description="Slow down actions (ms) for debugging")
    USER_AGENT: Optional[str] = Field(default=None)
    IGNORE_HTTPS_ERRORS: bool = Field(default=True)

    # ---- Timeout tiers (ms) ----
    TIMEOUT_VERY_SHORT: int = Field(default=1000, ge=1)
    TIMEOUT_SHORT: int = Field(default=5000, ge=1)
    TIMEOUT_MEDIUM: int = Field(default=10000, ge=1)
    TIMEOUT_MEDIUM_LONG: int = Field(default=15000, ge=1)
    TIMEOUT_LONG: int = Field(default=30000, ge=1)
    TIMEOUT_VERY_LONG: int = Field(default=60000, ge=1)
    TIMEOUT_EXTRA_LONG: int = Field(default=150000, ge=1)

    POLL_INTERVAL_MS: int = Field(default=500, ge=0)
    ACTION_TIMEOUT_MS: int = Field(default=5000, ge=100, description="Per-call driver timeout")
    PAGE_LOAD_TIMEOUT: int = Field(default=60000, ge=1000)

    # ---- Retry & error handling ----
    MAX_RETRIES: int = Field(default=3, ge=1)
    RETRY_DELAY: int = Field(default=1000, ge=0)

    # ---- Artifacts ----
    SCREENSHOT_DIR: Path = Field(default=Path("./screenshots"))

    # ---- Test data ----
    TEST_DATA_FILE: Path = Field(default=Path("./test_data.yaml"))
    TEST_USER_EMAIL: Optional[str] = None
    TEST_USER_PASSWORD: Optional[str] = None
    RUN_E2E: bool = Field(default=False, description="Run browser scenarios against BASE_URL")

    # ---- Logging ----
    LOG_LEVEL: LogLevel = Field(default=LogLevel.INFO)
    LOG_TO_FILE: bool = Field(default=False)
    LOG_FILE: Path = Field(default=Path("./logs/e2e.log"))
    COLORIZED_OUTPUT: bool = Field(default=True)

    # ---- Proxies ----
    PROXY_SERVER: Optional[str] = None
    PROXY_USERNAME: Optional[str] = None
    PROXY_PASSWORD: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("SCREENSHOT_DIR", "TEST_DATA_FILE", "LOG_FILE", mode="before")
    @classmethod
    def _coerce_to_path(cls, v):
        if isinstance(v, Path):
            return v
        return Path(str(v)) if v is not None else v

    @field_validator("SCREENSHOT_DIR", "TEST_DATA_FILE", "LOG_FILE", mode="after")
    @classmethod
    def _absolutize(cls, v: Path):
        return v if v.is_absolute() else Path.cwd() / v

    @field_validator("BASE_URL")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith("http"):
            raise ValueError("BASE_URL must be an absolute http(s) URL")
        return v.rstrip("/")

    @model_validator(mode="after")
    def _poll_inside_tiers(self) -> "Settings":
        # Every tier is used as a WaitSpec timeout with POLL_INTERVAL_MS as its interval.
        if self.POLL_INTERVAL_MS >= self.TIMEOUT_VERY_SHORT:
            raise ValueError("POLL_INTERVAL_MS must be smaller than TIMEOUT_VERY_SHORT")
        return self

    def ensure_dirs(self) -> None:
        """Create required directories (idempotent)."""
        for p in {self.SCREENSHOT_DIR, self.LOG_FILE.parent}:
            p.mkdir(parents=True, exist_ok=True)

    def playwright_launch_kwargs(self) -> dict:
        kwargs = {
            "headless": self.HEADLESS,
            "slow_mo": self.SLOW_MO,
        }
        if self.PROXY_SERVER:
            proxy = {"server": self.PROXY_SERVER}
            if self.PROXY_USERNAME and self.PROXY_PASSWORD:
                proxy["username"] = self.PROXY_USERNAME
                proxy["password"] = self.PROXY_PASSWORD
            kwargs["proxy"] = proxy
        return kwargs

    def playwright_context_kwargs(self) -> dict:
        ctx = {
            "viewport": {"width": self.VIEWPORT_WIDTH, "height": self.VIEWPORT_HEIGHT},
            "base_url": self.BASE_URL,
            "ignore_https_errors": self.IGNORE_HTTPS_ERRORS,
        }
        if self.USER_AGENT:
            ctx["user_agent"] = self.USER_AGENT
        return ctx


# --------- Public accessor (memoized) ---------

@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load and cache settings once per process.
    Call `get_settings.cache_clear()` if you need to reload after changing env.
    """
    s = Settings()
    s.ensure_dirs()
    return s


# --------- Timeout tiers as a small DTO for page objects ---------

class Timeouts(BaseModel):
    very_short: int
    short: int
    medium: int
    medium_long: int
    long: int
    very_long: int
    extra_long: int

    @classmethod
    def from_settings(cls, s: Settings) -> "Timeouts":
        return cls(
            very_short=s.TIMEOUT_VERY_SHORT,
            short=s.TIMEOUT_SHORT,
            medium=s.TIMEOUT_MEDIUM,
            medium_long=s.TIMEOUT_MEDIUM_LONG,
            long=s.TIMEOUT_LONG,
            very_long=s.TIMEOUT_VERY_LONG,
            extra_long=s.TIMEOUT_EXTRA_LONG,
        )

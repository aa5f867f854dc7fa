# multipath/settings/config.py  (Pydantic v2)
from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

from multipath.schemas import StudioSettings


class AppSettings(BaseSettings):
    # ---------- Storage ----------
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./multipath.db")
    # create_all on startup instead of running alembic (always on for SQLite)
    RUN_DB_CREATE_ALL: bool = Field(default=False)

    # ---------- Clock / local day ----------
    # IANA zone used for "today" and week boundaries; unset = host zone
    APP_TZ: Optional[str] = Field(default=None)

    # ---------- Logging ----------
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    # ---------- Studio defaults (used for fresh stores and imports) ----------
    DEFAULT_SEED: Optional[str] = Field(default=None)
    DEFAULT_DAILY_MAX_PATHS: int = Field(default=2, ge=0)
    DEFAULT_REQUIRE_WEEKLY_COVERAGE: bool = Field(default=True)
    DEFAULT_WEEK_STARTS_ON: Literal[0, 1] = Field(default=1)
    DEFAULT_LIMITS_MIN: int = Field(default=2, ge=0)
    DEFAULT_LIMITS_MAX: int = Field(default=3, ge=0)

    # populate an empty database with the example catalog
    SEED_EXAMPLES: bool = Field(default=True)

    # ---------- pydantic-settings config ----------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # allow lower/upper env names
        extra="ignore",
    )

    def studio_defaults(self) -> StudioSettings:
        return StudioSettings(
            seed=self.DEFAULT_SEED,
            daily_max_paths=self.DEFAULT_DAILY_MAX_PATHS,
            require_weekly_coverage=self.DEFAULT_REQUIRE_WEEKLY_COVERAGE,
            week_starts_on=self.DEFAULT_WEEK_STARTS_ON,
            default_limits_per_prompt=(self.DEFAULT_LIMITS_MIN, self.DEFAULT_LIMITS_MAX),
        )

settings = AppSettings()

"""
core/config.py -- Linkdeck settings, loaded once from the environment.

Only this module reads environment variables. Everything else receives a
Settings value (or the plain numbers taken from it) as a constructor
argument; see api/main.configure_state.

Sources, highest precedence first: keyword arguments, process environment,
then a .env file in the working directory. Field names double as the
variable names, upper-cased: bcrypt_cost is BCRYPT_COST.

get_settings() memoizes the first load with lru_cache. Settings is frozen,
so a loaded configuration cannot drift while the process runs.

Security notes:
  [M6] A SECRET_KEY shorter than 32 chars fails validation. A short HMAC key
       weakens every token signed with it.

  [M7] There is no default SECRET_KEY. An empty value loads, then
       TokenService rejects it with ConfigurationError during lifespan
       startup, so the process never serves requests without one.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or playlists/.
"""

import logging
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("linkdeck.config")

SEVEN_DAYS_SECONDS = 7 * 24 * 60 * 60


class Settings(BaseSettings):
    """Every tunable Linkdeck reads at startup.

    Each field has a default so tests can build Settings(...) with keyword
    overrides and no .env file. secret_key defaults to "" which means
    "not configured"; see [M7].
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    database_url: str = "sqlite:///linkdeck.db"

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    secret_key: str = ""
    bcrypt_cost: int = Field(default=12, ge=4, le=31)
    token_expire_seconds: int = Field(default=SEVEN_DAYS_SECONDS, gt=0)

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    cors_origins: list[str] = ["http://localhost:3000"]
    allowed_hosts: list[str] = ["*"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Reject configured-but-weak secrets [M6].

        An empty secret passes here on purpose: absence is reported as
        ConfigurationError by TokenService so there is one place that decides
        whether the process may start.
        """
        if self.secret_key and len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        if not self.secret_key:
            logger.warning("SECRET_KEY is not set; token service will refuse to start.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Load Settings on first call and return the same instance afterwards.

    Tests that change the environment must call get_settings.cache_clear()
    before the next call to see the new values.
    """
    return Settings()

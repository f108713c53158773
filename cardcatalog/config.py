from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CARDCATALOG_")

    app_name: str = "CardCatalog"
    debug: bool = False

    database_url: str = "sqlite+aiosqlite:///./data/cardcatalog.db"

    # "production" disables remote refreshes unless remote_fetch_enabled is set
    environment: str = "development"
    remote_fetch_enabled: bool = False

    # Shared secret for the scheduled refresh endpoint; empty disables the check
    cron_secret: str = ""

    http_timeout_seconds: float = 30.0
    user_agent: str = "CardCatalog/1.0"

    @property
    def remote_allowed(self) -> bool:
        """True when request handlers may reach out to the external catalog."""
        return self.remote_fetch_enabled or self.environment != "production"


settings = Settings()


# =============================================================================
# SEARCH LIMITS
# =============================================================================

# Ranked search never returns more than this many cards
MAX_RESULTS = 50

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100

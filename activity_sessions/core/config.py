# activity_sessions/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Values come from the process environment (Docker Compose / CI).
    model_config = SettingsConfigDict(extra="ignore")

    # The environment mode: 'local' or 'prod'
    ENV: str = "local"

    # --- Production URLs (for inside Docker) ---
    DATABASE_URL_PROD: str = ""
    KAFKA_BOOTSTRAP_SERVERS_PROD: str = ""

    # --- Local Development URLs (for running locally) ---
    DATABASE_URL_LOCAL: str = "sqlite:///./activity_sessions.db"
    KAFKA_BOOTSTRAP_SERVERS_LOCAL: str = ""

    # Secrets
    JWT_SECRET: str = "change-me"
    INTERNAL_API_KEY: str = "change-me"

    # --- Scheduling rules ---
    DEFAULT_WEEKS_AHEAD: int = 2
    # Materialized sessions are anchored at this local hour, whatever the
    # activity's configured start time.
    SESSION_ANCHOR_HOUR: int = 12
    UPCOMING_SESSIONS_LIMIT: int = 20
    OLD_SESSION_RETENTION_DAYS: int = 30
    REMINDER_LOOKAHEAD_HOURS: int = 24

    # --- Notifications ---
    NOTIFICATIONS_TOPIC: str = "activity.notifications.v1"
    NOTIFICATION_DISPATCH_BATCH: int = 100

    # --- Rate limiting ---
    RATE_LIMIT_ENABLED: bool = True
    MEMBERSHIP_RATE_LIMIT: str = "30/minute"

    # --- Background jobs ---
    SCHEDULER_ENABLED: bool = False

    # --- Dynamic Properties ---
    # These return the correct URL based on the ENV
    @property
    def DATABASE_URL(self) -> str:
        return (
            self.DATABASE_URL_LOCAL if self.ENV == "local" else self.DATABASE_URL_PROD
        )

    @property
    def KAFKA_BOOTSTRAP_SERVERS(self) -> str:
        return (
            self.KAFKA_BOOTSTRAP_SERVERS_LOCAL
            if self.ENV == "local"
            else self.KAFKA_BOOTSTRAP_SERVERS_PROD
        )


# Create a single instance of the settings
settings = Settings()

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ── Redis pub/sub ─────────────────────────────────────────
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_CHANNEL: str = "notifications"

    # ── WebSocket listener ────────────────────────────────────
    WS_PATH: str = "/ws"
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"

    def listen_address(self) -> str:
        """host:port as shown in startup logs."""
        return f"{self.HOST}:{self.PORT}"


settings = Settings()

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "MyL Deck Engine"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "postgresql+asyncpg://localhost:5432/myldeck"

    # Fallbacks for formats whose stored params omit a value
    default_deck_size: int = 50
    default_card_limit: int = 3
    default_starting_gold_required: bool = True

    # Largest accepted import payload, in characters
    max_import_payload_chars: int = 200_000


settings = Settings()

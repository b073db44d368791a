from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"

    # MongoDB URI - must be provided via environment variables
    mongo_uri: str = Field(validation_alias=AliasChoices("MONGO_URI", "MONGODB_URL"))
    mongo_db_name: str = "contact_form"  # Used when the URI has no database path
    mongo_server_selection_timeout_ms: int = 5000

    # Reconnect backoff
    max_retries: int = Field(default=5, ge=1)
    retry_base_delay_ms: int = 5000
    retry_max_delay_ms: int = 60000


@lru_cache
def get_settings():
    return Settings()

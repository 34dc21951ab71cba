from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    app_name: str = "MeetMe Search"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Database settings
    database_url: str = "sqlite+aiosqlite:///./meetme.db"

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # "text" or "json"

    # CORS settings
    allowed_origins: list[str] = ["http://localhost:4200", "http://localhost:8000"]

    # Search settings
    search_analytics_enabled: bool = True
    search_popular_terms_window_days: int = 30
    search_default_page_size: int = 20
    search_max_page_size: int = 100
    search_max_query_length: int = 200
    search_max_suggestions: int = 50

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()

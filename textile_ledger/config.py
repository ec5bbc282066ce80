from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    PROJECT_NAME: str = "Textile Ledger"
    API_V1_PREFIX: str = "/api/v1"
    APP_ENV: str = "development"

    # Primary schema (ledger_entries) and the separate "ledger" schema (bills, parties...)
    DATABASE_URL: str = "sqlite:///./textile.db"
    LEDGER_DATABASE_URL: str = "sqlite:///./ledger.db"
    AUTO_CREATE_TABLES: bool = False

    # Khata used when an entry is created or backfilled without one
    DEFAULT_KHATA_ID: int = 1

    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 200

    LOG_LEVEL: str = "INFO"
    LOGGER_NAME: str = "textile_ledger"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()

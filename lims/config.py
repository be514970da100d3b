from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "LIMS Inventory"
    DATABASE_URL: str = "sqlite:///./lims.db"

    # JWT signing
    SECRET_KEY: str = "change-me"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 72

    # Seeded on first start when the users table is empty
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_EMAIL: str = "admin@lab.local"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"

    # Components without a movement for this many days are flagged as old stock
    STALE_STOCK_WINDOW_DAYS: int = 90

    # Number of months covered by the dashboard movement charts
    REPORT_MONTHS: int = 6

    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env"}


settings = Settings()

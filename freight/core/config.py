from pydantic_settings import BaseSettings
from pathlib import Path

class Settings(BaseSettings):
    DATABASE_URL: str

    REDIS_URL: str = "redis://localhost:6379/0"

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours

    RATE_LIMIT: int = 100
    RATE_LIMIT_WINDOW: int = 600  # 10 minutes

    IDEMPOTENCY_TTL: int = 300  # 5 minutes
    PRICE_CACHE_TTL: int = 60   # 60 seconds

    RATE_TABLE_PATH: str = str(Path(__file__).resolve().parent.parent / "pricing" / "data" / "pricing_rate_table.json")
    LOAD_UNLOAD_DRIVER_FEE: int = 10000
    PLATFORM_FEE_RATE: str = "0.10"
    COMBINE_DISCOUNT_RATE: str = "0.30"

    TOSS_SECRET_KEY: str = ""
    TOSS_CLIENT_KEY: str = ""
    TOSS_CONFIRM_URL: str = "https://api.tosspayments.com/v1/payments/confirm"
    PAYMENT_TIMEOUT: int = 10

    ODCLOUD_BASE_URL: str = "https://api.odcloud.kr"
    ODCLOUD_API_KEY: str = ""
    REGISTRY_TIMEOUT: int = 10

    ADVISORY_ENABLED: bool = False
    ADVISORY_API_KEY: str = ""
    ADVISORY_BASE_URL: str = "https://api.deepseek.com"
    ADVISORY_MODEL: str = "deepseek-chat"
    ADVISORY_TIMEOUT: int = 10

    API_TITLE: str = "Freight Marketplace Service"
    API_DESCRIPTION: str = "Quote pricing, driver matching, counter-offers and payments for single-leg freight"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()

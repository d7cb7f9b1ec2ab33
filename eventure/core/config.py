from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str

    REDIS_URL: str

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours

    RATE_LIMIT: int = 100
    RATE_LIMIT_WINDOW: int = 600  # 10 minutes

    IDEMPOTENCY_TTL: int = 300  # 5 minutes
    DRAFT_TTL: int = 1800  # 30 minutes
    PAYMENT_SESSION_TTL: int = 900  # 15 minutes

    PAYMENT_CURRENCY: str = "INR"
    STRIPE_API_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""

    LISTING_POLL_INTERVAL: float = 5.0
    NOTIFICATION_TTL: float = 3.0

    # empty disables booking notifications
    WEBHOOK_URL: str = ""
    WEBHOOK_TIMEOUT: int = 10
    WEBHOOK_RETRIES: int = 3

    CELERY_BROKER_URL: str
    CELERY_BACKEND: str

    API_TITLE: str = "EVenture Booking Service"
    API_DESCRIPTION: str = "EV scooter rental bookings: quotes, payments and fleet availability"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()

from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./careops.db"

    # Email (Brevo)
    BREVO_API_KEY: Optional[str] = None
    BREVO_FROM_EMAIL: str = "appointments@careops.app"
    BREVO_FROM_NAME: str = "CareOps"

    # SMS
    TWILIO_ACCOUNT_SID: Optional[str] = None
    TWILIO_AUTH_TOKEN: Optional[str] = None
    TWILIO_PHONE_NUMBER: Optional[str] = None

    # Alert scanner thresholds
    OVERDUE_FORM_DAYS: int = 3
    UNANSWERED_MESSAGE_HOURS: int = 24

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()

import os
from datetime import timedelta
from dotenv import load_dotenv

from .errors import ConfigError

load_dotenv()


def _require(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise ConfigError(f"{name} must be set in the environment")
    return value


class Settings:
    APP_NAME: str = "SparkNest Notes"
    SQLALCHEMY_DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./sparknest.db")
    JWT_SECRET_KEY: str = _require("JWT_SECRET_KEY")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_DAYS: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7"))

    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Brevo Email API
    BREVO_API_KEY: str = os.getenv("BREVO_API_KEY", "")
    EMAIL_FROM_ADDRESS: str = os.getenv("EMAIL_FROM_ADDRESS", "noreply@sparknest.com")
    EMAIL_FROM_NAME: str = os.getenv("EMAIL_FROM_NAME", "SparkNest")

    OTP_EXPIRE_MINUTES: int = int(os.getenv("OTP_EXPIRE_MINUTES", "10"))
    OTP_CLEANUP_INTERVAL_SECONDS: int = int(os.getenv("OTP_CLEANUP_INTERVAL_SECONDS", "3600"))

    # passlib rejects anything under 4
    BCRYPT_ROUNDS: int = max(4, int(os.getenv("BCRYPT_ROUNDS", "12")))

settings = Settings()

def access_token_expires():
    return timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)

def otp_expires():
    return timedelta(minutes=settings.OTP_EXPIRE_MINUTES)

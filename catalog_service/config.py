# catalog_service/config.py - environment driven settings
import os

from dotenv import load_dotenv

load_dotenv()


def _as_bool(value, default=False):
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class CatalogConfig:
    # Auth
    AUTH_SECRET_KEY = os.environ.get("AUTH_SECRET_KEY")
    ALGORITHM = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS = 30
    OTP_LENGTH = 6
    OTP_EXPIRE_MINUTES = 10
    OTP_ECHO = _as_bool(os.environ.get("OTP_ECHO"), default=True)

    # Storage
    DATABASE_URL = os.environ.get("DATABASE_URL")
    UPLOAD_DIR = os.environ.get("UPLOAD_DIR", "./uploads")
    PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL", "")

    # Attachments
    MAX_IMAGES_PER_PRODUCT = 5
    MAX_IMAGE_BYTES = 5 * 1024 * 1024

    # HTTP
    API_PREFIX = os.environ.get("API_PREFIX", "/api")
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
        ).split(",")
        if origin.strip()
    ]
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Twilio & SendGrid
    TWILIO_ACCOUNT_SID = os.environ.get("TWILIO_ACCOUNT_SID")
    TWILIO_AUTH_TOKEN = os.environ.get("TWILIO_AUTH_TOKEN")
    TWILIO_PHONE_NUMBER = os.environ.get("TWILIO_PHONE_NUMBER")
    SENDGRID_API_KEY = os.environ.get("SENDGRID_API_KEY")
    MAIL_FROM_EMAIL = os.environ.get("MAIL_FROM_EMAIL")

    @classmethod
    def require_secret(cls):
        if not cls.AUTH_SECRET_KEY:
            raise RuntimeError(
                "AUTH_SECRET_KEY is not set. Please configure it in the environment."
            )
        return cls.AUTH_SECRET_KEY

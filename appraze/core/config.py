import os
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    return float(value) if value else None


class AISettings(BaseModel):
    openai_api_key: Optional[str] = Field(default=os.getenv("OPENAI_API_KEY"))
    model_name: str = Field(default=os.getenv("AI_MODEL_NAME", "gpt-4o"))
    api_url: str = Field(default=os.getenv("AI_API_URL", "https://api.openai.com/v1/chat/completions"))
    temperature: float = 0.7
    max_tokens: int = 2048
    # Unset means the request waits on the transport's own timeout
    request_timeout: Optional[float] = Field(default=_optional_float("AI_REQUEST_TIMEOUT"))


class EmailSettings(BaseModel):
    api_key: Optional[str] = Field(default=os.getenv("EMAIL_API_KEY"))
    api_url: str = Field(default=os.getenv("EMAIL_API_URL", "https://api.sendgrid.com/v3/mail/send"))
    sender: str = Field(default=os.getenv("EMAIL_SENDER", "hello@appraze.io"))
    app_name: str = "Appraze"
    app_url: str = Field(default=os.getenv("APP_URL", "https://appraze.io"))


class BillingSettings(BaseModel):
    stripe_secret_key: Optional[str] = Field(default=os.getenv("STRIPE_SECRET_KEY"))
    stripe_webhook_secret: Optional[str] = Field(default=os.getenv("STRIPE_WEBHOOK_SECRET"))
    stripe_api_version: str = "2023-10-16"


class Config(BaseModel):
    app_name: str = "Appraze"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./appraze.db")

    # Auth
    secret_key: str = os.getenv("SECRET_KEY", "dev-only-insecure-key-DO-NOT-USE-IN-PROD")
    access_token_expire_minutes: int = 60 * 24  # 24 hours
    refresh_token_expire_days: int = 7
    password_reset_expire_minutes: int = 60
    min_password_length: int = 6

    # External collaborators
    ai: AISettings = AISettings()
    email: EmailSettings = EmailSettings()
    billing: BillingSettings = BillingSettings()

    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    # CORS: comma-separated origins loaded from env
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:5173,http://localhost:3000,"
                "http://127.0.0.1:5173,http://127.0.0.1:3000",
            ).split(",")
            if o.strip()
        ]
    )

    rate_limit_per_minute: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))
    review_generation_rate: str = os.getenv("REVIEW_GENERATION_RATE", "10/minute")

settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if "dev-only" in settings.secret_key or "change-it" in settings.secret_key:
        raise RuntimeError(
            "FATAL: SECRET_KEY must be set for non-development environments. "
            "Set it as an environment variable."
        )
elif "dev-only" in settings.secret_key:
    _logger.warning("Using insecure default SECRET_KEY; only acceptable in development.")

from pathlib import Path
from typing import List

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Studio Box Office'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # Security
    SECRET_KEY: SecretStr = SecretStr('test_secret_key_change_in_production')
    ALGORITHM: str = 'HS256'

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',')]
        elif isinstance(v, list):
            return v
        return []

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'studio_box_office'
    DATABASE_URL: str = ''  # Full override, e.g. sqlite+aiosqlite:///./local.db

    # Connection pool (ignored for SQLite)
    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800
    DB_POOL_PRE_PING: bool = True

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:'
            f'{self.POSTGRES_PASSWORD.get_secret_value()}@'
            f'{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    # Seat holds
    RESERVATION_HOLD_MINUTES: int = 30
    RESERVATION_EXTENSION_MINUTES: int = 5
    MAX_RESERVATION_EXTENSIONS: int = 3
    MAX_SEATS_PER_RESERVATION: int = 10
    RESERVATION_SWEEP_INTERVAL_SECONDS: int = 60

    # Anonymous session cookie
    SESSION_COOKIE_NAME: str = 'reservation_session'
    SESSION_COOKIE_MAX_AGE_SECONDS: int = 60 * 60 * 24

    # Stripe
    STRIPE_SECRET_KEY: SecretStr = SecretStr('sk_test_change_me')
    STRIPE_PUBLISHABLE_KEY: str = ''
    PAYMENT_CURRENCY: str = 'usd'

    # Mailgun
    MAILGUN_API_KEY: SecretStr = SecretStr('')
    MAILGUN_DOMAIN: str = 'mg.example.com'
    MAILGUN_API_BASE_URL: str = 'https://api.mailgun.net/v3'
    EMAIL_FROM: str = 'Studio Box Office <tickets@example.com>'
    EMAIL_TIMEOUT_SECONDS: float = 10.0

    # Studio branding (emails and PDFs)
    STUDIO_NAME: str = 'Studio Box Office'
    STUDIO_PRIMARY_COLOR: str = '#8b5cf6'

    # Object storage (S3 compatible)
    S3_ENDPOINT_URL: str = ''
    S3_REGION: str = 'us-east-1'
    S3_ACCESS_KEY_ID: str = ''
    S3_SECRET_ACCESS_KEY: SecretStr = SecretStr('')
    S3_PUBLIC_BASE_URL: str = ''  # Falls back to the endpoint/bucket URL when empty
    TICKET_PDF_BUCKET: str = 'ticket-pdfs'
    TICKET_PDF_CACHE_HOURS: int = 24

    # Background tasks (confirmation emails, PDF generation)
    BACKGROUND_TASK_MAX_ATTEMPTS: int = 3
    BACKGROUND_TASK_BACKOFF_SECONDS: float = 2.0


settings = Settings()  # type: ignore

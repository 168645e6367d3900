# File: common/config/settings.py

from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings

# Calculate base directory for consistent file paths
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent.parent
ENV_PATH = BASE_DIR / ".env"


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"  # "production" or "development"

    BASE_DIR: Path = Field(default=BASE_DIR, description="Base directory of the project")

    # Security keys
    ACCESS_SECRET: str = Field(..., description="Secret for access tokens")

    # Token expiration & algorithms
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60 * 24, description="Access token expiry in minutes")
    ALGORITHM: str = Field("HS256", description="JWT signing algorithm")
    TOKEN_ISSUER: str = Field("civiclens-auth", description="JWT issuer claim")
    TOKEN_AUDIENCE: str = Field("civiclens-api", description="JWT audience claim")

    # Login throttling
    MAX_LOGIN_ATTEMPTS: int = Field(5, description="Failed logins allowed before lockout")
    LOGIN_LOCKOUT_SECONDS: int = Field(600, description="Lockout window after too many failed logins")

    # MongoDB
    MONGO_URI: str = Field("mongodb://localhost:27017", description="MongoDB connection URI")
    MONGO_DB: str = Field("civiclens_db", description="MongoDB database name")
    MONGO_TIMEOUT: int = Field(5000, description="MongoDB connection timeout in milliseconds")

    # Redis
    REDIS_HOST: str = Field("localhost", description="Redis host")
    REDIS_PORT: int = Field(6379, description="Redis port")
    REDIS_DB: int = Field(0, description="Redis database number")
    REDIS_PASSWORD: str = Field("", description="Redis password")
    REDIS_SSL_CA_CERTS: str = Field("", description="Path to Redis SSL CA certificate")
    REDIS_SSL_CERT: str = Field("", description="Path to Redis SSL certificate")
    REDIS_SSL_KEY: str = Field("", description="Path to Redis SSL key")
    REDIS_USE_SSL: bool = Field(False, description="Use SSL for Redis connection")

    # LLM
    LLM_PRIMARY_MODEL: str = Field("gemini/gemini-2.5-flash", description="Vision-capable model used for analysis")
    LLM_FALLBACK_MODEL: str = Field("", description="Optional model tried when the primary fails")
    LLM_TIMEOUT: int = Field(30, description="LLM request timeout in seconds")
    LLM_TEMPERATURE: float = Field(0.1, description="Sampling temperature for structured calls")
    FINGERPRINT_MAX_ATTEMPTS: int = Field(2, description="Attempts before a fingerprint is given up")

    # Submissions
    SUBMISSION_DRAFT_TTL: int = Field(60 * 60 * 24, description="Seconds a pending submission draft is kept")
    MAX_IMAGE_BYTES: int = Field(10 * 1024 * 1024, description="Largest accepted decoded photo size")

    # Seed authority account
    AUTHORITY_EMAIL: str = Field("", description="Email of the authority account created at startup")
    AUTHORITY_PASSWORD: str = Field("", description="Password of the authority account created at startup")
    AUTHORITY_FULL_NAME: str = Field("City Authority", description="Display name of the seed authority")
    AUTHORITY_INVITE_CODE: str = Field("", description="Code required to self-register as an authority")

    # Sentry
    SENTRY_DSN: str = Field("", description="Sentry DSN; empty disables reporting")
    SENTRY_TRACES_SAMPLE_RATE: float = Field(0.0, description="Sentry traces sample rate")
    SENTRY_SEND_PII: bool = Field(False, description="Send personally identifiable info to Sentry")

    # CORS
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["http://localhost:3000"], description="Allowed CORS origins")

    class Config:
        env_file = ENV_PATH
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


# Singleton settings instance
settings = Settings()

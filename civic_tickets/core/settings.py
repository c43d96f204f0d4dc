"""
Core settings and environment variables for the Civic Ticket Pipeline.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "Civic Ticket Pipeline"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Server (uvicorn)
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # CORS - Frontend URLs allowed to access this API (comma-separated)
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Durable log (Redis Streams)
    # - LOG_BACKEND: "redis" (default) or "memory" (single-process dev/test only)
    LOG_BACKEND: str = "redis"
    REDIS_URL: str = "redis://localhost:6379"
    TICKET_STREAM: str = "tickets-stream"

    # Ticket store
    # - STORE_BACKEND: "sqlite" (default) or "firestore"
    STORE_BACKEND: str = "sqlite"
    DB_PATH: str = "tickets.db"
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON

    # Staff authentication
    JWT_SECRET: str = "change-me"
    TOKEN_TTL_HOURS: int = 24

    # Boundary configuration (one city per deployment)
    # - CITY_ALIASES: extra comma-separated names matched against the resolved address
    CITY_NAME: str = "bangalore"
    CITY_ALIASES: Optional[str] = None

    # Geocoding
    # - GEOCODING_PROVIDER: "nominatim" (default, no API key) or "google"
    # - GOOGLE_MAPS_API_KEY: optional; only used when provider is "google"
    GEOCODING_PROVIDER: str = "nominatim"
    GOOGLE_MAPS_API_KEY: Optional[str] = None
    GEOCODING_USER_AGENT: str = "CivicReportingSystem/1.0"
    GEOCODING_TIMEOUT_SECONDS: float = 5.0
    GEOCODING_MAX_ATTEMPTS: int = 3

    # Stream consumer
    # - CONSUMER_START_POSITION: where to begin when no cursor has been saved yet,
    #   "earliest" (replay the whole stream) or "latest" (only new entries)
    RUN_CONSUMER: bool = True
    CONSUMER_BLOCK_MS: int = 5000
    CONSUMER_BATCH_SIZE: int = 100
    CONSUMER_ERROR_PAUSE_SECONDS: float = 1.0
    CONSUMER_START_POSITION: str = "earliest"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


# Global settings instance
settings = Settings()

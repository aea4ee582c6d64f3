import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


BASE_DIR = Path(__file__).resolve().parent
ENV_PATH = BASE_DIR / ".env"
if ENV_PATH.exists():
    load_dotenv(ENV_PATH)


@dataclass
class Config:
    """Application configuration loaded from environment variables."""

    SECRET_KEY: str = os.getenv("SECRET_KEY", "change_me")
    CATALOG_BASE_URL: str = os.getenv("CATALOG_BASE_URL", "https://www.sfu.ca/bin/wcm/course-outlines")
    CATALOG_MAX_RETRIES: int = int(os.getenv("CATALOG_MAX_RETRIES", "5"))
    CATALOG_YEAR: str = os.getenv("CATALOG_YEAR", "2025")
    CATALOG_TERM: str = os.getenv("CATALOG_TERM", "spring")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PORT", "5000"))
    DEBUG: bool = os.getenv("FLASK_DEBUG", "false").lower() == "true"

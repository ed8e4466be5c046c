"""Application configuration read from environment variables."""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.getenv("DATA_DIR", BASE_DIR / "raw_data"))

POSTGRES_CONFIG = {
    "host": os.getenv("POSTGRES_HOST", "localhost"),
    "port": int(os.getenv("POSTGRES_PORT", "5432")),
    "database": os.getenv("POSTGRES_DB", "salon"),
    "user": os.getenv("POSTGRES_USER", "postgres"),
    "password": os.getenv("POSTGRES_PASSWORD", "postgres"),
}

REDIS_CONFIG = {
    "host": os.getenv("REDIS_HOST", "localhost"),
    "port": int(os.getenv("REDIS_PORT", "6379")),
    "db": int(os.getenv("REDIS_DB", "0")),
}

MONGO_CONFIG = {
    "uri": os.getenv("MONGO_URI", "mongodb://localhost:27017"),
    "database": os.getenv("MONGO_DB", "salon"),
}

JWT_CONFIG = {
    "secret": os.getenv("JWT_SECRET", "change-me"),
    "algorithm": os.getenv("JWT_ALGORITHM", "HS256"),
    "expires_minutes": int(os.getenv("JWT_EXPIRES_MINUTES", "10080")),  # 7 days
}

# Cache TTLs in seconds
CACHE_TTL = 3600
STATS_CACHE_TTL = int(os.getenv("STATS_CACHE_TTL", "300"))

# Reviews
REVIEWS_AUTO_APPROVE = os.getenv("REVIEWS_AUTO_APPROVE", "true").lower() in ("1", "true", "yes")
RECENT_WINDOW_DAYS = 30
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
REVIEW_MIN_LENGTH = 10
REVIEW_MAX_LENGTH = 1000

# Client-side storage
REVIEW_STORE = os.getenv("REVIEW_STORE", "file")  # "file" or "redis"
REVIEW_STORE_PATH = Path(os.getenv("REVIEW_STORE_PATH", BASE_DIR / "local_data" / "reviews.json"))
REVIEW_STORE_KEY = os.getenv("REVIEW_STORE_KEY", "salon:reviews")
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000/api")

ALLOWED_ORIGINS = [origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()]

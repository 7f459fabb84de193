import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY")
SESSION_MAX_AGE = int(os.getenv("SESSION_MAX_AGE", "86400"))
SESSION_HTTPS_ONLY = _env_bool("SESSION_HTTPS_ONLY", True)
SESSION_SAME_SITE = os.getenv("SESSION_SAME_SITE", "lax")

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

# "mongo" or "memory"
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "mongo").lower()
MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "training_points")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# When set, a student may only complain about activities they registered for.
REQUIRE_REGISTRATION_FOR_COMPLAINT = _env_bool("REQUIRE_REGISTRATION_FOR_COMPLAINT", False)

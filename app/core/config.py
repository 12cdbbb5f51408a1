# app/core/config.py
import logging
import os

logger = logging.getLogger("openpolitics.config")
logger.setLevel(logging.INFO)


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        logger.warning(f"Invalid {name}, using default {default}")
        return default


DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "postgresql://postgres@localhost:5432/openpolitics"
)

JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = _int_env("JWT_EXPIRES_MINUTES", 60 * 24)

# Trust votes lapse after this many days without being deleted
TRUST_VOTE_TTL_DAYS = _int_env("TRUST_VOTE_TTL_DAYS", 90)

# Hard cap on merge-tree walks (ancestors and descendants)
MERGE_TREE_MAX_DEPTH = _int_env("MERGE_TREE_MAX_DEPTH", 32)

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if o.strip()
]

AUTO_CREATE_TABLES = os.getenv("AUTO_CREATE_TABLES", "false").lower() in ("1", "true", "yes")

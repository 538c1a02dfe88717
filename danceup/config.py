# danceup/config.py
import os, logging

# ── Helpers ───────────────────────────────────────────────────────────────────
def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    try:
        return int(raw) if raw.strip() else default
    except ValueError:
        return default

# ── Database ─────────────────────────────────────────────────────────────────
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///danceup.db")

# ── Auth / sessions ──────────────────────────────────────────────────────────
SECRET_KEY          = os.environ.get("SECRET_KEY", "dev-secret-change-me")
SESSION_SALT        = "danceup-session"
SESSION_MAX_AGE     = _int_env("SESSION_MAX_AGE", 7 * 24 * 3600)  # 7 days
PASSWORD_MIN_LENGTH = _int_env("PASSWORD_MIN_LENGTH", 6)

# ── Blob storage (uploaded images) ───────────────────────────────────────────
BLOB_ROOT       = os.environ.get("BLOB_ROOT", os.path.join(os.getcwd(), "blobs"))
BLOB_BASE_URL   = os.environ.get("BLOB_BASE_URL", "/blobs").rstrip("/")
MAX_IMAGE_BYTES = _int_env("MAX_IMAGE_BYTES", 5 * 1024 * 1024)  # 5MB

# ── Schedule feeds ───────────────────────────────────────────────────────────
FEED_IDLE_SECONDS = _int_env("FEED_IDLE_SECONDS", 30 * 60)  # unread feeds are closed after this

# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# ── Startup logging ──────────────────────────────────────────────────────────
logger = logging.getLogger(__name__)
logger.info(f"[CONFIG] DATABASE_URL={DATABASE_URL.split('@')[-1]}, BLOB_ROOT={BLOB_ROOT}")

"""Static configuration for chatsweep.

All operator-editable settings (backend, retention, schedule, reporting,
logging) live in a single JSON file for quick edits without touching Python.
"""

import json
import os

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# config.json sits at the project root; CHATSWEEP_CONFIG points elsewhere
# (e.g. a mounted secret in a container).
CONFIG_PATH = os.getenv("CHATSWEEP_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, operator-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _project_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Which adapters back the sweep: "sqlite" (local files) or "firebase".
BACKEND = _CONFIG.get("backend", "sqlite")

# Retention window and store limits.
# - RETENTION_DAYS: messages older than now - RETENTION_DAYS are purged
# - MAX_BATCH_SIZE: documents per atomic delete batch (Firestore caps at 500)
# - BLOB_DELETE_CONCURRENCY: attachment deletes in flight at once
# - QUERY_PAGE_SIZE: documents per page when reading expired messages
_retention = _CONFIG.get("retention", {})
RETENTION_DAYS = int(_retention.get("days", 30))
MESSAGES_COLLECTION = _retention.get("collection", "messages")
TIMESTAMP_FIELD = _retention.get("timestamp_field", "timestamp")
MAX_BATCH_SIZE = int(_retention.get("max_batch_size", 500))
BLOB_DELETE_CONCURRENCY = int(_retention.get("blob_delete_concurrency", 16))
QUERY_PAGE_SIZE = int(_retention.get("query_page_size", 500))

# Daily trigger, wall-clock time in a fixed timezone (03:00 Seoul by default).
_schedule = _CONFIG.get("schedule", {})
SCHEDULE_HOUR = int(_schedule.get("hour", 3))
SCHEDULE_MINUTE = int(_schedule.get("minute", 0))
SCHEDULE_TIMEZONE = _schedule.get("timezone", "Asia/Seoul")

# Local backend locations.
DB_PATH = _project_path(_CONFIG.get("sqlite", {}).get("path", "chatsweep.db"))
BLOB_ROOT = _project_path(_CONFIG.get("local_blobs", {}).get("root", "blobs"))

# Firebase backend. Secrets stay in the environment (.env).
_firebase = _CONFIG.get("firebase", {})
FIREBASE_CREDENTIALS = _firebase.get("credentials")
FIREBASE_STORAGE_BUCKET = _firebase.get("storage_bucket")

# Reporting switches adapters without changing core logic.
_reporting = _CONFIG.get("reporting", {})
REPORTING_METHOD = _reporting.get("method", "log")
# Bot chat id is only required when method=bot.
BOT_CHAT_ID = _reporting.get("bot_chat_id")
REPORT_NOOP_RUNS = bool(_reporting.get("report_noop_runs", False))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})

import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "academix"),
}

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Text generation; leave the key empty to run with fallback messages only.
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_CHAT_MODEL = os.getenv("GEMINI_CHAT_MODEL", "gemini-3-pro-preview")
GEMINI_FAST_MODEL = os.getenv("GEMINI_FAST_MODEL", "gemini-3-flash-preview")

DEPARTMENTS = ["CSE", "ECE", "EEE", "MECH", "CIVIL"]
RECENT_SESSIONS_LIMIT = 5

# Seconds before a cached workspace is refetched, and before an unused one is dropped.
WORKSPACE_MAX_AGE = float(os.getenv("WORKSPACE_MAX_AGE", "30"))
WORKSPACE_IDLE_TIMEOUT = float(os.getenv("WORKSPACE_IDLE_TIMEOUT", "1800"))

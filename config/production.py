import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "academix"),
}

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_CHAT_MODEL = os.getenv("GEMINI_CHAT_MODEL", "gemini-3-pro-preview")
GEMINI_FAST_MODEL = os.getenv("GEMINI_FAST_MODEL", "gemini-3-flash-preview")

DEPARTMENTS = [d.strip() for d in os.getenv("DEPARTMENTS", "CSE,ECE,EEE,MECH,CIVIL").split(",") if d.strip()]
RECENT_SESSIONS_LIMIT = int(os.getenv("RECENT_SESSIONS_LIMIT", "5"))

# Seconds before a cached workspace is refetched, and before an unused one is dropped.
WORKSPACE_MAX_AGE = float(os.getenv("WORKSPACE_MAX_AGE", "30"))
WORKSPACE_IDLE_TIMEOUT = float(os.getenv("WORKSPACE_IDLE_TIMEOUT", "1800"))

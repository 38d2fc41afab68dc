import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "academix_test"),
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = False

GEMINI_API_KEY = ""
GEMINI_CHAT_MODEL = "gemini-3-pro-preview"
GEMINI_FAST_MODEL = "gemini-3-flash-preview"

DEPARTMENTS = ["CSE", "ECE", "EEE", "MECH", "CIVIL"]
RECENT_SESSIONS_LIMIT = 5

WORKSPACE_MAX_AGE = 0.0
WORKSPACE_IDLE_TIMEOUT = 1800.0

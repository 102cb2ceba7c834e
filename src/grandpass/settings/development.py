import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# Base URL of the visitor backend (no trailing slash).
API_BASE = os.getenv("API_BASE", "http://localhost:5000").rstrip("/")
# Seconds; unset means requests wait indefinitely.
API_TIMEOUT = float(os.getenv("API_TIMEOUT")) if os.getenv("API_TIMEOUT") else None

DEBUG = True

SCAN_LOCK_SECONDS = int(os.getenv("SCAN_LOCK_SECONDS", "30"))
SESSION_DAYS = int(os.getenv("SESSION_DAYS", "7"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

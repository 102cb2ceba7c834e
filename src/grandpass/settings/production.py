import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

API_BASE = os.getenv("API_BASE", "https://apivisitor.onrender.com").rstrip("/")
API_TIMEOUT = float(os.getenv("API_TIMEOUT", "30"))

DEBUG = False

SCAN_LOCK_SECONDS = int(os.getenv("SCAN_LOCK_SECONDS", "30"))
SESSION_DAYS = int(os.getenv("SESSION_DAYS", "7"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

SECRET_KEY = "test-secret"

API_BASE = "http://backend.test"
API_TIMEOUT = 5.0

DEBUG = False
TESTING = True

SCAN_LOCK_SECONDS = 30
SESSION_DAYS = 1
LOG_LEVEL = "WARNING"

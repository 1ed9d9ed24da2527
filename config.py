import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    REDIS_URL = data.get("REDIS_URL", "redis://localhost:6379/0")
    CACHE_BACKEND = data.get("CACHE_BACKEND", "redis")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")

    # Sessions
    SESSION_TTL = int(data.get("SESSION_TTL", 3600))
    MAX_SESSIONS_PER_USER = int(data.get("MAX_SESSIONS_PER_USER", 5))
    SESSION_COOKIE_NAME = data.get("SESSION_COOKIE_NAME", "sessionId")
    SESSION_HEADER_NAME = data.get("SESSION_HEADER_NAME", "X-Session-ID")
    SESSION_CLEANUP_INTERVAL = int(data.get("SESSION_CLEANUP_INTERVAL", 900))

    # Background jobs
    JOB_PROCESSOR_ENABLED = bool(data.get("JOB_PROCESSOR_ENABLED", True))
    JOB_POLL_INTERVAL = float(data.get("JOB_POLL_INTERVAL", 5))
    MAX_CONCURRENT_JOBS = int(data.get("MAX_CONCURRENT_JOBS", 5))
    JOB_MAX_ATTEMPTS = int(data.get("JOB_MAX_ATTEMPTS", 3))
    JOB_RESULT_TTL = int(data.get("JOB_RESULT_TTL", 3600))

    # Notifications
    NOTIFICATION_HISTORY_LIMIT = int(data.get("NOTIFICATION_HISTORY_LIMIT", 100))

    # Rate limiting: {"auth": {"limit": 5, "window": 300}, ...}
    RATE_LIMITS = data.get("RATE_LIMITS", {})
    JOB_BURST_LIMIT = int(data.get("JOB_BURST_LIMIT", 20))

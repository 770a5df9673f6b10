import os

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./eventsphere.db")

# Redis configuration
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# Seconds a per-event lock is held before it expires / how long to wait for it
LOCK_TIMEOUT = int(os.getenv("LOCK_TIMEOUT", "10"))
LOCK_BLOCKING_TIMEOUT = int(os.getenv("LOCK_BLOCKING_TIMEOUT", "5"))

# Team join codes
TEAM_CODE_LENGTH = int(os.getenv("TEAM_CODE_LENGTH", "6"))
TEAM_CODE_MAX_ATTEMPTS = int(os.getenv("TEAM_CODE_MAX_ATTEMPTS", "5"))

# Used when an event does not set its own team size limit
DEFAULT_MAX_TEAM_SIZE = int(os.getenv("DEFAULT_MAX_TEAM_SIZE", "5"))

# Celery; broker and result backend default to the lock Redis
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", REDIS_URL)
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", REDIS_URL)
MAINTENANCE_QUEUE = os.getenv("MAINTENANCE_QUEUE", "maintenance")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def get_redis_url():
    return REDIS_URL


def get_database_url():
    return DATABASE_URL

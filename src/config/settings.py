"""
Configuration settings for the User Registry service
"""

import os
import logging

logger = logging.getLogger(__name__)

# Environment configuration
ENV = os.getenv("ENV", "PROD")  # PROD or QA
SERVICE_NAME = os.getenv("SERVICE_NAME", "UserRegistry")
DATABASE_URL = os.getenv("DATABASE_URL")
PORT = int(os.getenv("PORT", 8080))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Connection pool configuration
DB_POOL_MIN_SIZE = int(os.getenv("DB_POOL_MIN_SIZE", 2))
DB_POOL_MAX_SIZE = int(os.getenv("DB_POOL_MAX_SIZE", 10))
DB_COMMAND_TIMEOUT = float(os.getenv("DB_COMMAND_TIMEOUT", 60))

# CORS settings
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]


def validate_settings():
    """Validate required environment variables before touching the database"""
    if not DATABASE_URL:
        raise ValueError("DATABASE_URL environment variable is required")
    if DB_POOL_MIN_SIZE > DB_POOL_MAX_SIZE:
        raise ValueError(
            f"DB_POOL_MIN_SIZE ({DB_POOL_MIN_SIZE}) must not exceed DB_POOL_MAX_SIZE ({DB_POOL_MAX_SIZE})"
        )
    logger.info(f"Environment: {ENV}, Service: {SERVICE_NAME}")

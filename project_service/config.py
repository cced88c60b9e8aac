# project_service/config.py
# Environment-aware configuration for the project service

import os
from typing import Literal

# Environment detection
ENV: Literal["dev", "staging", "prod"] = os.environ.get("ENV", "dev")  # type: ignore
IS_DEV = (ENV == "dev")
IS_STAGING = (ENV == "staging")
IS_PROD = (ENV == "prod")

# JWT verification (tokens are issued by the identity provider, never here)
SECRET_KEY = os.environ.get("SECRET_KEY", "your-secret-key-here")  # TODO: Load the provider's signing key in prod
ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")

# Client whose roles are read from resource_access in the token
AUTH_CLIENT_ID = os.environ.get("AUTH_CLIENT_ID", "ticketing-app")

# Database configuration
# DATABASE_URL takes precedence (managed Postgres in staging/prod)
# Falls back to SQLite for local development
DATABASE_URL = os.environ.get("DATABASE_URL", "").strip()
DATABASE_PATH = os.environ.get("DATABASE_PATH", "projects.db")

# Task service (remote collaborator for task counts, completion and deletion)
TASK_SERVICE_URL = os.environ.get("TASK_SERVICE_URL", "http://127.0.0.1:8082").rstrip("/")
TASK_SERVICE_TIMEOUT = int(os.environ.get("TASK_SERVICE_TIMEOUT", "10"))

# CORS origins (expand for staging/prod)
CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

if IS_STAGING or IS_PROD:
    extra_origins = os.environ.get("CORS_ORIGINS", "")
    if extra_origins:
        CORS_ORIGINS.extend(origin.strip() for origin in extra_origins.split(",") if origin.strip())

# Database type detection
IS_POSTGRES = DATABASE_URL.startswith(("postgres://", "postgresql://"))

print(f"[CONFIG] Environment: {ENV}")
print(f"[CONFIG] Database: {'PostgreSQL' if IS_POSTGRES else 'SQLite (local dev)'}")
print(f"[CONFIG] Task service: {TASK_SERVICE_URL} (timeout {TASK_SERVICE_TIMEOUT}s)")

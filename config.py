import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./tenant_auth.db")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Tokens
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_ALGORITHM = data.get("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = data.get("JWT_ISSUER", "tenant-auth-service")
    ACCESS_TOKEN_TTL_SECONDS = int(data.get("ACCESS_TOKEN_TTL_SECONDS", 900))
    REFRESH_TOKEN_TTL_SECONDS = int(data.get("REFRESH_TOKEN_TTL_SECONDS", 604800))
    REVOKED_TOKEN_RETENTION_DAYS = int(data.get("REVOKED_TOKEN_RETENTION_DAYS", 30))
    BCRYPT_ROUNDS = int(data.get("BCRYPT_ROUNDS", 12))

    # Tenancy
    TENANT_HEADER_NAME = data.get("TENANT_HEADER_NAME", "X-Tenant-ID")
    DEFAULT_TENANT_ID = str(data.get("DEFAULT_TENANT_ID", "1"))
    ENABLE_TENANT_LOGGING = bool(data.get("ENABLE_TENANT_LOGGING", False))

    AUDIT_QUEUE_SIZE = int(data.get("AUDIT_QUEUE_SIZE", 1000))
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")

    # Throttling, in "limits" notation
    RATE_LIMIT_ENABLED = bool(data.get("RATE_LIMIT_ENABLED", True))
    RATE_LIMIT_STORAGE_URI = data.get("RATE_LIMIT_STORAGE_URI", "memory://")
    LOGIN_RATE_LIMIT = data.get("LOGIN_RATE_LIMIT", "5/minute")
    REFRESH_RATE_LIMIT = data.get("REFRESH_RATE_LIMIT", "10/minute")

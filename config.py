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
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./test.db")
    AUTO_CREATE_TABLES = bool(data.get("AUTO_CREATE_TABLES", True))
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", ["http://localhost:3000"])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Token signing: one secret per token kind
    ACCESS_TOKEN_SECRET = data.get(
        "ACCESS_TOKEN_SECRET", "dev-access-secret-change-in-production"
    )
    REFRESH_TOKEN_SECRET = data.get(
        "REFRESH_TOKEN_SECRET", "dev-refresh-secret-change-in-production"
    )
    ACCESS_TOKEN_TTL_MINUTES = int(data.get("ACCESS_TOKEN_TTL_MINUTES", 15))
    REFRESH_TOKEN_TTL_DAYS = int(data.get("REFRESH_TOKEN_TTL_DAYS", 7))
    JWT_ALGORITHM = data.get("JWT_ALGORITHM", "HS256")

    # Two-factor
    TOTP_ISSUER = data.get("TOTP_ISSUER", "pong")
    TOTP_VALID_WINDOW = int(data.get("TOTP_VALID_WINDOW", 1))

    COOKIE_SECURE = bool(data.get("COOKIE_SECURE", False))

    # Route policy consumed by the edge access check
    AUTH_ENTRY_ROUTE = data.get("AUTH_ENTRY_ROUTE", "/")
    PROFILE_COMPLETION_ROUTE = data.get("PROFILE_COMPLETION_ROUTE", "/complete-profile")
    TWO_FACTOR_ROUTE = data.get("TWO_FACTOR_ROUTE", "/verify-2fa")
    PROFILE_ROUTE = data.get("PROFILE_ROUTE", "/profile")
    PROTECTED_ROUTE_PREFIXES = data.get(
        "PROTECTED_ROUTE_PREFIXES",
        ["/game", "/profile", "/settings", "/leaderboard", "/chat", "/channel"],
    )

    # Client side
    BACKEND_URL = data.get("BACKEND_URL", "http://localhost:8000")
    REFRESH_WAIT_TIMEOUT_SECONDS = float(data.get("REFRESH_WAIT_TIMEOUT_SECONDS", 10))

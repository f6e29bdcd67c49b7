import os


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Database (unset -> in-memory store, data is lost on restart)
DATABASE_URL = os.getenv("DATABASE_URL") or None
SEED_SAMPLE_DATA = _env_flag("SEED_SAMPLE_DATA", True)

# Cache
CACHE_ENABLED = _env_flag("CACHE_ENABLED", True)
REDIS_URL = os.getenv("REDIS_URL") or None
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD") or None
CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS", "300"))
CACHE_TIMEOUT_SECONDS = float(os.getenv("CACHE_TIMEOUT_SECONDS", "2"))

# Prediction backend (OpenAI-compatible chat completions)
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY") or None
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-3.5-turbo")
OPENAI_TIMEOUT_SECONDS = float(os.getenv("OPENAI_TIMEOUT_SECONDS", "30"))

# Security
DEFAULT_JWT_SECRET = "dev-jwt-secret-change-in-production-not-secure"
JWT_SECRET = os.getenv("JWT_SECRET") or DEFAULT_JWT_SECRET
IS_DEFAULT_JWT_SECRET = JWT_SECRET == DEFAULT_JWT_SECRET
JWT_ALGORITHM = "HS256"
JWT_EXPIRES_IN_DAYS = int(os.getenv("JWT_EXPIRES_IN_DAYS", "7"))

# HTTP
CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:3000")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Logging
    LOG_DIR = os.getenv("LOG_DIR", "logs")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    TRACE_LOG_FILENAME = os.getenv("TRACE_LOG_FILENAME", "search_trace.log")
    TRACE_LOG_PATH = os.path.join(LOG_DIR, TRACE_LOG_FILENAME)

    # Typesense (server-side only, the admin key never leaves this process)
    TYPESENSE_HOST = os.getenv("TYPESENSE_HOST", "localhost")
    TYPESENSE_PORT = os.getenv("TYPESENSE_PORT", "8108")
    TYPESENSE_PROTOCOL = os.getenv("TYPESENSE_PROTOCOL", "http")
    TYPESENSE_API_KEY = os.getenv("TYPESENSE_API_KEY", "")
    TYPESENSE_COLLECTION = os.getenv("TYPESENSE_COLLECTION", "places")
    TYPESENSE_TIMEOUT_SECONDS = float(os.getenv("TYPESENSE_TIMEOUT_SECONDS", "10"))

    # Search Application
    APP_PORT = int(os.getenv("APP_PORT", "8000"))
    SERVICE_HOST = os.getenv("SERVICE_HOST", "127.0.0.1")

    # Input limits
    MAX_QUERY_LENGTH = int(os.getenv("MAX_QUERY_LENGTH", "200"))
    MAX_RADIUS_KM = float(os.getenv("MAX_RADIUS_KM", "500"))
    MAX_PAGE = int(os.getenv("MAX_PAGE", "10"))
    DEFAULT_LIMIT = int(os.getenv("DEFAULT_LIMIT", "20"))
    MAX_LIMIT = int(os.getenv("MAX_LIMIT", "100"))

    # "near me" queries with a position but no radius
    NEAR_ME_RADIUS_KM = float(os.getenv("NEAR_ME_RADIUS_KM", "25"))

    # Rate limiting (per caller IP)
    RATE_LIMIT_WINDOW_SECONDS = float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))
    RATE_LIMIT_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "120"))
    RATE_LIMIT_SWEEP_SECONDS = float(os.getenv("RATE_LIMIT_SWEEP_SECONDS", "300"))

    # Response caching
    CACHE_MAX_AGE_SECONDS = int(os.getenv("CACHE_MAX_AGE_SECONDS", "10"))
    CACHE_STALE_WHILE_REVALIDATE_SECONDS = int(
        os.getenv("CACHE_STALE_WHILE_REVALIDATE_SECONDS", "30")
    )


settings = Settings()

"""Configuration loader for the beta signup service with environment-specific support"""

import os
from pathlib import Path

from dotenv import load_dotenv

server_dir = Path(__file__).parent.parent.parent
env_path = server_dir / ".env"

# Load .env file if it exists. For local development only.
if env_path.exists():
    load_dotenv(env_path)

# Configuration dictionary - set once at initialization
config = {
    "log_level": os.getenv("LOG_LEVEL", "INFO"),
    "environment": os.getenv("ENVIRONMENT"),
    "port": int(os.getenv("PORT", "8888")),
    "app_base_url": os.getenv("APP_BASE_URL", "http://localhost:8888"),
    "confirm_page_path": os.getenv("CONFIRM_PAGE_PATH", "/confirm.html"),
    # Directory holding the static marketing page. Not mounted when unset.
    "static_dir": os.getenv("STATIC_DIR"),
    # Proxy addresses whose X-Forwarded-For header is trusted. The client address
    # taken from it is the rate limit key, so never "*" behind an open port.
    "forwarded_allow_ips": os.getenv("FORWARDED_ALLOW_IPS", "127.0.0.1"),
    "redis_url": os.getenv("REDIS_URL", "redis://localhost:6379/0"),
    "recaptcha_secret_key": os.getenv("RECAPTCHA_SECRET_KEY"),
    "recaptcha_min_score": float(os.getenv("RECAPTCHA_MIN_SCORE", "0.7")),
    "recaptcha_verify_url": os.getenv(
        "RECAPTCHA_VERIFY_URL", "https://www.google.com/recaptcha/api/siteverify"
    ),
    "airtable_api_key": os.getenv("AIRTABLE_API_KEY"),
    "airtable_base_id": os.getenv("AIRTABLE_BASE_ID"),
    "airtable_table_name": os.getenv("AIRTABLE_TABLE_NAME", "Signups"),
    "airtable_api_url": os.getenv("AIRTABLE_API_URL", "https://api.airtable.com/v0"),
    "mailgun_api_key": os.getenv("MAILGUN_API_KEY"),
    "mailgun_domain": os.getenv("MAILGUN_DOMAIN"),
    "sender_email": os.getenv("SENDER_EMAIL"),
    "support_email": os.getenv("SUPPORT_EMAIL"),
    "product_name": os.getenv("PRODUCT_NAME", "CloakID"),
    "rate_limit_max_requests": int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "5")),
    "rate_limit_window_seconds": int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "3600")),
    "http_timeout_seconds": float(os.getenv("HTTP_TIMEOUT_SECONDS", "10.0")),
}

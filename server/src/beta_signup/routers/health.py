from datetime import datetime, timezone

import redis
from fastapi import APIRouter, Depends, HTTPException

from beta_signup.config import config
from beta_signup.services.providers import get_redis

health = APIRouter()

# Signups cannot be stored, confirmed or reported to the team without these
REQUIRED_SETTINGS = [
    "airtable_api_key",
    "airtable_base_id",
    "mailgun_api_key",
    "mailgun_domain",
    "sender_email",
    "support_email",
]


def _base_status() -> dict:
    return {
        "status": "healthy",
        "service": "beta-signup",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": config.get("environment") or "development",
    }


@health.get("/health")
async def health_check():
    """Basic health check endpoint"""
    return _base_status()


@health.get("/health/detailed")
async def detailed_health_check(redis_client: redis.Redis = Depends(get_redis)):
    """Detailed health check with rate limit store and configuration checks"""
    health_status = {**_base_status(), "checks": {}}

    # The rate limiter fails open, so Redis being down degrades rather than breaks signup
    try:
        redis_client.ping()
        health_status["checks"]["redis"] = "healthy"
    except redis.RedisError as e:
        health_status["checks"]["redis"] = f"degraded: {str(e)}"

    missing = [key for key in REQUIRED_SETTINGS if not config.get(key)]
    if missing:
        health_status["checks"]["configuration"] = f"missing: {', '.join(missing)}"
        health_status["status"] = "unhealthy"
    else:
        health_status["checks"]["configuration"] = "healthy"

    if not config.get("recaptcha_secret_key"):
        health_status["checks"]["bot_verification"] = "disabled"
    else:
        health_status["checks"]["bot_verification"] = "healthy"

    if health_status["status"] == "unhealthy":
        raise HTTPException(status_code=503, detail=health_status)

    return health_status

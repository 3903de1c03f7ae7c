"""Shared clients and the signup flow, built lazily for FastAPI dependency injection"""

import logging

import redis

from beta_signup.backends.airtable_client import AirtableClient
from beta_signup.backends.email_client import EmailClient
from beta_signup.backends.recaptcha_client import RecaptchaClient
from beta_signup.config import config
from beta_signup.services.bot_gate import BotGate
from beta_signup.services.notifier import Notifier
from beta_signup.services.rate_limiter import RateLimiter
from beta_signup.services.record_store import SignupRecordStore
from beta_signup.services.signup_flow import SignupFlow

logger = logging.getLogger(__name__)

_redis_client = None
_signup_flow = None


def get_redis() -> redis.Redis:
    """Get the Redis client (singleton with a pooled connection)"""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            config["redis_url"],
            decode_responses=True,
            max_connections=20,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
    return _redis_client


def build_signup_flow(app_config: dict, redis_client: redis.Redis) -> SignupFlow:
    """Wire a SignupFlow and its collaborators from a configuration dict"""
    return SignupFlow(
        config=app_config,
        rate_limiter=RateLimiter.from_config(redis_client, app_config),
        bot_gate=BotGate(
            RecaptchaClient(app_config), min_score=app_config["recaptcha_min_score"]
        ),
        record_store=SignupRecordStore(AirtableClient(app_config)),
        notifier=Notifier(EmailClient(app_config), app_config),
    )


def get_signup_flow() -> SignupFlow:
    """Get or create the global signup flow"""
    global _signup_flow
    if _signup_flow is None:
        _signup_flow = build_signup_flow(config, get_redis())
        logger.info("Initialized signup flow")
    return _signup_flow

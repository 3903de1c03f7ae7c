"""Data models for the beta signup service"""

from beta_signup.models.rate_limit import RateLimitCounter
from beta_signup.models.signup_record import SignupRecord, SignupStatus

__all__ = [
    "SignupRecord",
    "SignupStatus",
    "RateLimitCounter",
]

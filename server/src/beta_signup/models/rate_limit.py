"""Per-source rate limit counter"""

from pydantic import BaseModel


class RateLimitCounter(BaseModel):
    """Signup attempts from one source address within the current window"""

    count: int
    window_start: float  # epoch seconds

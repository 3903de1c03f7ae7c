import logging
import time
from typing import Callable, Optional

import redis
from pydantic import ValidationError as PydanticValidationError

from beta_signup.models.rate_limit import RateLimitCounter

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Fixed-window signup counter per source address, stored in Redis.

    The counter is read, checked and written back without a transaction, so a
    burst of concurrent requests from one address can briefly overshoot the
    limit. If Redis is unavailable the limiter fails open.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        max_per_window: int = 5,
        window_seconds: int = 3600,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            redis_client: Redis client instance (from dependency injection)
            max_per_window: Allowed requests per source within one window
            window_seconds: Window length in seconds (default: 3600 = 1 hour)
            clock: Returns the current epoch time; defaults to time.time
        """
        self.redis_client = redis_client
        self.max_per_window = max_per_window
        self.window_seconds = window_seconds
        self.clock = clock or time.time

    @classmethod
    def from_config(cls, redis_client: redis.Redis, config: dict) -> "RateLimiter":
        return cls(
            redis_client,
            max_per_window=config["rate_limit_max_requests"],
            window_seconds=config["rate_limit_window_seconds"],
        )

    def _counter_key(self, source_key: str) -> str:
        return f"rate_limit:{source_key}"

    def _read_counter(self, key: str) -> Optional[RateLimitCounter]:
        raw = self.redis_client.get(key)
        if not raw:
            return None
        try:
            return RateLimitCounter.model_validate_json(raw)
        except PydanticValidationError:
            logger.error(f"Corrupted rate limit counter at {key}, starting a new window")
            return None

    def _write_counter(self, key: str, counter: RateLimitCounter) -> None:
        # Let Redis drop counters once their window can no longer matter
        self.redis_client.setex(key, self.window_seconds, counter.model_dump_json())

    def check_and_consume(self, source_key: str) -> bool:
        """
        Count one request from source_key and decide whether it may proceed.

        Returns:
            True if the request is within quota (or Redis is unreachable),
            False if the source has exhausted the current window
        """
        key = self._counter_key(source_key)
        now = self.clock()
        try:
            counter = self._read_counter(key)

            if counter is None or now - counter.window_start > self.window_seconds:
                self._write_counter(key, RateLimitCounter(count=1, window_start=now))
                return True

            if counter.count >= self.max_per_window:
                logger.warning(
                    f"Rate limit exceeded for {source_key}: "
                    f"{counter.count}/{self.max_per_window} in current window"
                )
                return False

            counter.count += 1
            self._write_counter(key, counter)
            return True

        except redis.RedisError as e:
            logger.error(
                f"Redis error checking rate limit for {source_key}, allowing request: {e}"
            )
            return True

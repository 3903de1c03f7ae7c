"""Human verification for signup submissions"""

import logging
from typing import Optional

import httpx
from pydantic import BaseModel

from beta_signup.backends.recaptcha_client import RecaptchaClient
from beta_signup.errors import DependencyError

logger = logging.getLogger(__name__)


class BotVerdict(BaseModel):
    accepted: bool
    score: Optional[float] = None


class BotGate:
    """Decides whether a signup came from a human using reCAPTCHA v3 scores"""

    def __init__(self, recaptcha_client: RecaptchaClient, min_score: float = 0.7):
        self.recaptcha_client = recaptcha_client
        self.min_score = min_score

    async def verify(
        self, token: Optional[str], remote_ip: Optional[str] = None
    ) -> BotVerdict:
        """
        Verify a client token with the provider.

        A missing secret disables the check entirely (accepted, score 1.0).
        Otherwise the provider is called once; a returned score below
        min_score rejects the request even when the provider reports success.

        Raises:
            DependencyError: If the provider cannot be reached or errors
        """
        if not self.recaptcha_client.is_configured:
            logger.warning(
                "RECAPTCHA_SECRET_KEY not configured, skipping bot verification"
            )
            return BotVerdict(accepted=True, score=1.0)

        if not token:
            logger.info("Signup without a reCAPTCHA token, rejecting")
            return BotVerdict(accepted=False)

        try:
            result = await self.recaptcha_client.siteverify(token, remote_ip)
        except httpx.HTTPError as e:
            logger.error(f"reCAPTCHA verification request failed: {e}")
            raise DependencyError("Failed to process signup") from e

        score = result.get("score")
        accepted = bool(result.get("success", False))
        if accepted and score is not None and score < self.min_score:
            logger.info(f"reCAPTCHA score {score} below threshold {self.min_score}")
            accepted = False

        return BotVerdict(accepted=accepted, score=score)

"""
Signup verification flow: intake, email verification and questionnaire completion.

A record moves forward only, ``unverified -> verified -> completed``. Each step
checks the prior state it requires before writing, and performs its external
calls strictly in sequence; the first failing call aborts the step. Nothing
is rolled back, so a record stored before a failed email send stays stored.
"""

import logging
import uuid
from typing import Optional
from urllib.parse import urlencode

from beta_signup.errors import (
    AuthorizationStateError,
    RateLimitError,
    ValidationError,
)
from beta_signup.models.signup_record import SignupStatus
from beta_signup.services.bot_gate import BotGate
from beta_signup.services.notifier import Notifier
from beta_signup.services.rate_limiter import RateLimiter
from beta_signup.services.record_store import SignupRecordStore
from beta_signup.services.signup_validation import (
    validate_email,
    validate_questionnaire,
    validate_why,
)

logger = logging.getLogger(__name__)

# Redirect error codes understood by the landing page
MISSING_TOKEN = "missing_token"
INVALID_TOKEN = "invalid_token"
VERIFICATION_FAILED = "verification_failed"

SIGNUP_ACCEPTED_MESSAGE = "Signup successful"


def generate_token() -> str:
    return str(uuid.uuid4())


class SignupFlow:
    """Coordinates the rate limiter, bot gate, record store and notifier"""

    def __init__(
        self,
        config: dict,
        rate_limiter: RateLimiter,
        bot_gate: BotGate,
        record_store: SignupRecordStore,
        notifier: Notifier,
    ):
        self.app_base_url = config["app_base_url"].rstrip("/")
        self.confirm_page_path = config["confirm_page_path"]
        self.rate_limiter = rate_limiter
        self.bot_gate = bot_gate
        self.record_store = record_store
        self.notifier = notifier

    def verify_url(self, token: str) -> str:
        return f"{self.app_base_url}/verify?{urlencode({'token': token})}"

    def confirm_location(self, token: str) -> str:
        return f"{self.confirm_page_path}?{urlencode({'token': token})}"

    @staticmethod
    def error_location(code: str) -> str:
        return f"/?error={code}"

    @staticmethod
    def _accepted() -> dict:
        return {"success": True, "message": SIGNUP_ACCEPTED_MESSAGE}

    async def intake(
        self,
        email: Optional[str],
        why: Optional[str],
        recaptcha_token: Optional[str],
        honeypot: Optional[str],
        source_address: Optional[str],
    ) -> dict:
        """
        Accept a new beta application.

        Returns:
            The success payload. A filled honeypot gets the same payload
            without anything being stored or sent.

        Raises:
            ValidationError: Bad email or why text, or the bot gate rejected it
            RateLimitError: The source address is over quota
            DependencyError: Storage, bot verification or email failed
        """
        if honeypot:
            logger.info(f"Honeypot filled by {source_address}, dropping signup")
            return self._accepted()

        email = validate_email(email)
        why = validate_why(why)

        if not source_address:
            logger.warning(f"No client address for signup {email}, skipping rate limit")
        elif not self.rate_limiter.check_and_consume(source_address):
            raise RateLimitError()

        verdict = await self.bot_gate.verify(recaptcha_token, source_address)
        if not verdict.accepted:
            logger.info(
                f"Bot gate rejected signup from {source_address} (score={verdict.score})"
            )
            raise ValidationError("Bot verification failed")

        token = generate_token()
        record = await self.record_store.create(
            email=email,
            why_text=why,
            source_address=source_address,
            bot_score=verdict.score if verdict.score is not None else 0.0,
            verification_token=token,
        )
        await self.notifier.send_verification_email(record, self.verify_url(token))
        await self.notifier.notify_new_signup(record)

        logger.info(f"Signup accepted: {email} (record {record.id})")
        return self._accepted()

    async def verify(self, token: Optional[str]) -> str:
        """
        Handle a click on the emailed verification link.

        Never raises: every outcome is a redirect location, since the caller
        is a browser following a link.
        """
        if not token:
            return self.error_location(MISSING_TOKEN)

        try:
            record = await self.record_store.find_by_token(token)
            if record is None:
                logger.info("Verification attempted with an unknown token")
                return self.error_location(INVALID_TOKEN)

            if record.status != SignupStatus.UNVERIFIED:
                logger.info(f"Record {record.id} already {record.status.value}")
                return self.confirm_location(token)

            record = await self.record_store.mark_verified(record.id)
            await self.notifier.notify_verified(record)

            logger.info(f"Verified: {record.email}")
            return self.confirm_location(token)

        except Exception:
            logger.exception("Verification error")
            return self.error_location(VERIFICATION_FAILED)

    async def complete(
        self,
        token: Optional[str],
        problem_category: Optional[str],
        pain_level: Optional[str],
        other_problem_text: Optional[str] = None,
    ) -> dict:
        """
        Store the follow-up questionnaire of a verified applicant.

        Raises:
            ValidationError: Missing token or questionnaire answers
            AuthorizationStateError: Unknown token, or record not verified
            DependencyError: Storage or email failed
        """
        if not token:
            raise ValidationError("Token is required")

        problem_category, pain_level, other_problem_text = validate_questionnaire(
            problem_category, pain_level, other_problem_text
        )

        record = await self.record_store.find_by_token(token)
        if record is None:
            raise AuthorizationStateError("Invalid token", reason="unknown_token")

        if record.status != SignupStatus.VERIFIED:
            # Already-completed applicants get the same answer as unverified ones
            reason = (
                "already_completed"
                if record.status == SignupStatus.COMPLETED
                else "not_verified"
            )
            raise AuthorizationStateError(
                "Please verify your email first", reason=reason
            )

        record = await self.record_store.mark_completed(
            record.id,
            problem_category=problem_category,
            pain_level=pain_level,
            other_problem_text=other_problem_text,
        )
        await self.notifier.notify_completed(record)

        logger.info(f"Application complete: {record.email}")
        return {"success": True}

"""Signup record persistence on top of the Airtable signups table"""

import logging
from datetime import datetime, timezone
from typing import Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from beta_signup.backends.airtable_client import AirtableClient
from beta_signup.errors import DependencyError
from beta_signup.models.signup_record import (
    FIELD_BOT_SCORE,
    FIELD_COMPLETED_DATE,
    FIELD_EMAIL,
    FIELD_OTHER_PROBLEM,
    FIELD_PAIN_LEVEL,
    FIELD_PROBLEM_CATEGORY,
    FIELD_SIGNUP_DATE,
    FIELD_SOURCE_ADDRESS,
    FIELD_STATUS,
    FIELD_TOKEN,
    FIELD_VERIFIED_DATE,
    FIELD_WHY,
    SignupRecord,
    SignupStatus,
)

logger = logging.getLogger(__name__)


def today() -> str:
    """Current UTC date as YYYY-MM-DD, the format of the table's date columns"""
    return datetime.now(timezone.utc).date().isoformat()


def token_formula(token: str) -> str:
    """Airtable formula matching a verification token, with the value quoted"""
    escaped = token.replace("\\", "\\\\").replace('"', '\\"')
    return f'{{{FIELD_TOKEN}}} = "{escaped}"'


class SignupRecordStore:
    """Reads and writes signup records; every Airtable failure becomes a DependencyError"""

    def __init__(self, airtable_client: AirtableClient):
        self.airtable = airtable_client

    async def create(
        self,
        email: str,
        why_text: str,
        source_address: Optional[str],
        bot_score: float,
        verification_token: str,
    ) -> SignupRecord:
        fields = {
            FIELD_EMAIL: email,
            FIELD_WHY: why_text,
            FIELD_BOT_SCORE: bot_score,
            FIELD_TOKEN: verification_token,
            FIELD_STATUS: SignupStatus.UNVERIFIED.value,
            FIELD_SIGNUP_DATE: today(),
        }
        if source_address:
            fields[FIELD_SOURCE_ADDRESS] = source_address

        try:
            created = await self.airtable.create_record(fields)
        except httpx.HTTPError as e:
            raise DependencyError("Failed to store signup") from e

        logger.info(f"Created signup record {created['id']}")
        return self._to_record(created)

    async def find_by_token(self, token: str) -> Optional[SignupRecord]:
        """
        Look up the record carrying a verification token.

        Returns:
            The record, or None if no record has this token
        """
        try:
            records = await self.airtable.find_records(token_formula(token))
        except httpx.HTTPError as e:
            raise DependencyError("Failed to look up signup") from e

        if not records:
            return None
        if len(records) > 1:
            logger.warning(
                f"{len(records)} signup records share one verification token, "
                f"using {records[0].get('id')}"
            )
        return self._to_record(records[0])

    async def mark_verified(self, record_id: str) -> SignupRecord:
        return await self._update(
            record_id,
            {
                FIELD_STATUS: SignupStatus.VERIFIED.value,
                FIELD_VERIFIED_DATE: today(),
            },
        )

    async def mark_completed(
        self,
        record_id: str,
        problem_category: str,
        pain_level: str,
        other_problem_text: Optional[str] = None,
    ) -> SignupRecord:
        fields = {
            FIELD_STATUS: SignupStatus.COMPLETED.value,
            FIELD_PROBLEM_CATEGORY: problem_category,
            FIELD_PAIN_LEVEL: pain_level,
            FIELD_COMPLETED_DATE: today(),
        }
        if other_problem_text:
            fields[FIELD_OTHER_PROBLEM] = other_problem_text
        return await self._update(record_id, fields)

    async def _update(self, record_id: str, fields: dict) -> SignupRecord:
        try:
            updated = await self.airtable.update_record(record_id, fields)
        except httpx.HTTPError as e:
            raise DependencyError("Failed to update signup") from e
        return self._to_record(updated)

    def _to_record(self, raw: dict) -> SignupRecord:
        try:
            return SignupRecord.from_airtable(raw)
        except (KeyError, PydanticValidationError) as e:
            logger.error(f"Unreadable signup record {raw.get('id')}: {e}")
            raise DependencyError("Unreadable signup record") from e

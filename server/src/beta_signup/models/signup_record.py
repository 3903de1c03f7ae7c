"""Signup record model and its Airtable column mapping"""

import enum
from typing import Any, Dict, Optional

from pydantic import BaseModel


class SignupStatus(str, enum.Enum):
    UNVERIFIED = "unverified"
    VERIFIED = "verified"
    COMPLETED = "completed"


# Airtable column names for each record attribute
FIELD_EMAIL = "Email Address"
FIELD_WHY = "Why CloakID"
FIELD_SOURCE_ADDRESS = "Source IP"
FIELD_BOT_SCORE = "Bot Score"
FIELD_TOKEN = "Verification Token"
FIELD_STATUS = "Status"
FIELD_PROBLEM_CATEGORY = "Problem Category"
FIELD_OTHER_PROBLEM = "Other Problem Text"
FIELD_PAIN_LEVEL = "Pain Level"
FIELD_SIGNUP_DATE = "Signup Date"
FIELD_VERIFIED_DATE = "Verified Date"
FIELD_COMPLETED_DATE = "Completed Date"


class SignupRecord(BaseModel):
    """A beta application as persisted in the signups table"""

    id: str
    email: str
    why_text: str = ""
    source_address: Optional[str] = None
    bot_score: float = 0.0
    verification_token: str
    status: SignupStatus = SignupStatus.UNVERIFIED
    problem_category: Optional[str] = None
    other_problem_text: Optional[str] = None
    pain_level: Optional[str] = None
    signup_date: Optional[str] = None
    verified_date: Optional[str] = None
    completed_date: Optional[str] = None

    @classmethod
    def from_airtable(cls, record: Dict[str, Any]) -> "SignupRecord":
        """Build a record from an Airtable API record ({"id": ..., "fields": {...}})"""
        fields = record.get("fields", {})
        pain_level = fields.get(FIELD_PAIN_LEVEL)
        return cls(
            id=record["id"],
            email=fields.get(FIELD_EMAIL, ""),
            why_text=fields.get(FIELD_WHY, ""),
            source_address=fields.get(FIELD_SOURCE_ADDRESS),
            bot_score=fields.get(FIELD_BOT_SCORE) or 0.0,
            verification_token=fields.get(FIELD_TOKEN, ""),
            # Rows created by hand in Airtable may lack a status
            status=fields.get(FIELD_STATUS) or SignupStatus.UNVERIFIED,
            problem_category=fields.get(FIELD_PROBLEM_CATEGORY),
            other_problem_text=fields.get(FIELD_OTHER_PROBLEM),
            pain_level=str(pain_level) if pain_level is not None else None,
            signup_date=fields.get(FIELD_SIGNUP_DATE),
            verified_date=fields.get(FIELD_VERIFIED_DATE),
            completed_date=fields.get(FIELD_COMPLETED_DATE),
        )

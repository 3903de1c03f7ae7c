"""
Submission checks for the signup and questionnaire forms.

Each validator returns the normalized value or raises ValidationError with a
message that can be shown to the applicant as-is.
"""

import re
from typing import Optional

from beta_signup.errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
URL_PATTERN = re.compile(r"(https?://|www\.)", re.IGNORECASE)
# Six or more of the same character in a row
REPEATED_CHAR_PATTERN = re.compile(r"(.)\1{5,}", re.DOTALL)

WHY_MIN_LENGTH = 20
WHY_MAX_LENGTH = 2000
OTHER_PROBLEM_MAX_LENGTH = 1000
QUESTIONNAIRE_FIELD_MAX_LENGTH = 100

# Known throwaway inbox providers
DISPOSABLE_DOMAINS = frozenset(
    {
        "10minutemail.com", "10minutemail.net", "10minutemail.org",
        "guerrillamail.com", "guerrillamail.net", "guerrillamail.org",
        "guerrillamail.info", "guerrillamailblock.com", "grr.la",
        "sharklasers.com", "pokemail.net", "spam4.me",
        "mailinator.com", "mailinator.net", "mailinator2.com", "mailinater.com",
        "binkmail.com", "bobmail.info", "chammy.info", "devnullmail.com",
        "letthemeatspam.com", "spamhereplease.com", "tradermail.info",
        "temp-mail.org", "temp-mail.io", "tempmail.com", "tempmail.net",
        "tmpmail.org", "tmpmail.net", "tempail.com", "tempemail.com",
        "tempinbox.com", "mytemp.email",
        "throwaway.email", "throwawaymail.com",
        "getnada.com", "getairmail.com", "fakeinbox.com",
        "trashmail.com", "mytrashmail.com", "maildrop.cc",
        "yopmail.com", "yopmail.fr", "yopmail.net",
        "dispostable.com", "spamgourmet.com", "mohmal.com",
        "burnermail.io", "emailondeck.com", "mintemail.com",
        "crazymailing.com", "mailcatch.com", "discard.email",
        "mailnesia.com", "moakt.com", "emailfake.com",
    }
)


def is_disposable_domain(domain: str) -> bool:
    """True for a denylisted domain or any subdomain of one"""
    domain = domain.lower().rstrip(".")
    parts = domain.split(".")
    return any(".".join(parts[i:]) in DISPOSABLE_DOMAINS for i in range(len(parts) - 1))


def validate_email(email: Optional[str]) -> str:
    """Return the trimmed, lower-cased address"""
    email = (email or "").strip().lower()
    if not email:
        raise ValidationError("Email is required")

    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Please enter a valid email address")

    if is_disposable_domain(email.rsplit("@", 1)[1]):
        raise ValidationError("Please use a permanent email address")

    return email


def validate_why(why: Optional[str]) -> str:
    """Return the trimmed justification text"""
    why = (why or "").strip()
    if len(why) < WHY_MIN_LENGTH:
        raise ValidationError(
            f"Please tell us more about why you want to join "
            f"(at least {WHY_MIN_LENGTH} characters)."
        )
    if len(why) > WHY_MAX_LENGTH:
        raise ValidationError(
            f"Please keep your answer under {WHY_MAX_LENGTH} characters."
        )
    if URL_PATTERN.search(why):
        raise ValidationError("Please don't include links in your answer.")
    if REPEATED_CHAR_PATTERN.search(why):
        raise ValidationError("Please tell us in your own words why you want to join.")
    return why


def validate_questionnaire(
    problem_category: Optional[str],
    pain_level: Optional[str],
    other_problem_text: Optional[str],
) -> tuple[str, str, Optional[str]]:
    """Return (problem_category, pain_level, other_problem_text), trimmed"""
    problem_category = (problem_category or "").strip()
    pain_level = (pain_level or "").strip()
    other_problem_text = (other_problem_text or "").strip() or None

    if not problem_category or not pain_level:
        raise ValidationError("Please complete all fields")

    if (
        len(problem_category) > QUESTIONNAIRE_FIELD_MAX_LENGTH
        or len(pain_level) > QUESTIONNAIRE_FIELD_MAX_LENGTH
    ):
        raise ValidationError("Invalid questionnaire answer")

    if other_problem_text and len(other_problem_text) > OTHER_PROBLEM_MAX_LENGTH:
        raise ValidationError(
            f"Please describe your problem in fewer than "
            f"{OTHER_PROBLEM_MAX_LENGTH} characters"
        )

    return problem_category, pain_level, other_problem_text

"""Transactional emails sent at each step of the signup funnel"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from jinja2 import Environment, FileSystemLoader, select_autoescape

from beta_signup.backends.email_client import EmailClient
from beta_signup.errors import DependencyError
from beta_signup.models.signup_record import SignupRecord

logger = logging.getLogger(__name__)

# Get template directory relative to this file
template_dir = Path(__file__).parent.parent / "templates" / "emails"
templates = Environment(
    loader=FileSystemLoader(str(template_dir)),
    autoescape=select_autoescape(["html"]),
)


class Notifier:
    """Renders and sends the applicant and support-team emails"""

    def __init__(self, email_client: EmailClient, config: dict):
        self.email_client = email_client
        self.support_email = config.get("support_email")
        self.product_name = config.get("product_name", "CloakID")

    async def send_verification_email(
        self, record: SignupRecord, verify_url: str
    ) -> None:
        """Ask the applicant to confirm their address via the one-time link"""
        await self._send(
            to=record.email,
            subject=f"Confirm your {self.product_name} beta application",
            template="verification",
            tag="beta-verification",
            context={"record": record, "verify_url": verify_url},
        )

    async def notify_new_signup(self, record: SignupRecord) -> None:
        await self._notify_team(
            subject="New Beta Signup!",
            template="team_new_signup",
            record=record,
        )

    async def notify_verified(self, record: SignupRecord) -> None:
        await self._notify_team(
            subject="Beta Application Verified!",
            template="team_verified",
            record=record,
        )

    async def notify_completed(self, record: SignupRecord) -> None:
        await self._notify_team(
            subject="Beta Application Complete!",
            template="team_completed",
            record=record,
        )

    async def _notify_team(
        self, subject: str, template: str, record: SignupRecord
    ) -> None:
        if not self.support_email:
            logger.warning(
                f"SUPPORT_EMAIL not configured, skipping '{subject}' notification"
            )
            return
        await self._send(
            to=self.support_email,
            subject=subject,
            template=template,
            tag="beta-team",
            context={"record": record},
        )

    def render(self, template: str, context: Dict[str, Any]) -> Dict[str, str]:
        """Render the HTML and plain-text bodies of a message"""
        context = {
            "product_name": self.product_name,
            "support_email": self.support_email,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **context,
        }
        return {
            "html": templates.get_template(f"{template}.html").render(**context),
            "text": templates.get_template(f"{template}.txt").render(**context),
        }

    async def _send(
        self,
        to: str,
        subject: str,
        template: str,
        tag: str,
        context: Dict[str, Any],
    ) -> None:
        body = self.render(template, context)
        try:
            await self.email_client.send_email(
                to=to,
                subject=subject,
                html=body["html"],
                text=body["text"],
                tag=tag,
            )
        except RuntimeError as e:
            raise DependencyError("Failed to send email") from e

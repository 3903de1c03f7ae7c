import logging
from typing import Dict, Optional

from mailgun.client import Client

logger = logging.getLogger(__name__)


class EmailClient:
    def __init__(self, config: dict):
        self.mailgun_api_key = config["mailgun_api_key"]
        self.domain = config["mailgun_domain"]
        self.sender_email = config["sender_email"]

        self.client = Client(auth=("api", self.mailgun_api_key))

    async def send_email(
        self,
        to: str,
        subject: str,
        html: str,
        text: Optional[str] = None,
        tag: str = "beta-signup",
    ) -> Dict:
        """
        Send email using Mailgun API

        Args:
            to: Recipient email address
            subject: Email subject
            html: HTML body
            text: Plain-text alternative body (optional)
            tag: Mailgun tag used to group messages in analytics

        Returns:
            Dict containing Mailgun API response

        Raises:
            RuntimeError: If email sending fails
        """
        data = {
            "from": self.sender_email,
            "to": to,
            "subject": subject,
            "html": html,
            "o:tag": tag,
        }
        if text:
            data["text"] = text

        try:
            req = self.client.messages.create(data=data, domain=self.domain)
            response = req.json()

            if req.status_code != 200:
                logger.error(f"Mailgun API error: {req.status_code} - {response}")
                raise RuntimeError(f"Failed to send email: {response}")

            logger.info(f"Email sent to {to}: {response.get('id', 'unknown')}")
            return response

        except Exception as e:
            logger.error(f"Failed to send email to {to}: {str(e)}")
            raise RuntimeError(f"Email sending failed: {str(e)}") from e

"""Google reCAPTCHA v3 siteverify client"""

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class RecaptchaClient:
    def __init__(self, config: dict, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.secret_key = (config.get("recaptcha_secret_key") or "").strip()
        self.verify_url = config["recaptcha_verify_url"]
        self.timeout = config.get("http_timeout_seconds", 10.0)
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.secret_key)

    async def siteverify(
        self, token: str, remote_ip: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Exchange a client token for Google's verdict.

        Args:
            token: The reCAPTCHA token produced by grecaptcha.execute on the page
            remote_ip: Optional IP address of the user

        Returns:
            The siteverify JSON ({"success": bool, "score": float, ...})

        Raises:
            httpx.HTTPStatusError: For non-2xx responses
            httpx.RequestError: If Google is unreachable
        """
        async with httpx.AsyncClient(
            transport=self.transport, timeout=self.timeout
        ) as client:
            response = await client.post(
                self.verify_url,
                data={
                    "secret": self.secret_key,
                    "response": token,
                    "remoteip": remote_ip or "",
                },
            )
            response.raise_for_status()
            result = response.json()

        if not result.get("success", False):
            logger.warning(
                f"[recaptcha] Verification failed: {result.get('error-codes', [])}"
            )
        return result

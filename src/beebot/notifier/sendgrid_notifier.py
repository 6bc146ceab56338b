"""
SendGrid email notifier.

This module sends alert emails through the SendGrid v3 'mail/send' endpoint.
All recipients share a single personalization, so one alert is one API call.
"""

import logging
from typing import Any, Dict, List, Sequence

import aiohttp

from beebot.contracts import EmailNotifier
from beebot.domain import EmailMessage
from beebot.errors import DeliveryError

# Module logger
logger = logging.getLogger(__name__)

SENDGRID_MAIL_SEND_URL = "https://api.sendgrid.com/v3/mail/send"


class SendgridNotifier(EmailNotifier):
    """An EmailNotifier backed by the SendGrid v3 API."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        token: str,
        sender: str,
        recipients: Sequence[str],
        url: str = SENDGRID_MAIL_SEND_URL,
    ) -> None:
        """
        Initializes the notifier.

        Args:
            session: An active aiohttp.ClientSession.
            token: The SendGrid API key.
            sender: The sender address.
            recipients: One or more recipient addresses.
            url: The 'mail/send' endpoint.

        Raises:
            ValueError: If no recipient is given.
        """
        if not recipients:
            raise ValueError("At least one recipient must be provided.")

        self._session: aiohttp.ClientSession = session
        self._token: str = token
        self._sender: str = sender
        self._recipients: List[str] = list(recipients)
        self._url: str = url

    def _build_payload(self, message: EmailMessage) -> Dict[str, Any]:
        return {
            "personalizations": [
                {
                    "to": [{"email": recipient} for recipient in self._recipients],
                    "subject": message.subject,
                }
            ],
            "from": {"email": self._sender},
            "content": [{"type": "text/plain", "value": message.body}],
        }

    async def _post(self, message: EmailMessage) -> None:
        headers = {"Authorization": f"Bearer {self._token}"}
        async with self._session.post(
            self._url, json=self._build_payload(message), headers=headers
        ) as response:
            if not 200 <= response.status < 300:
                detail = await response.text()
                raise DeliveryError(f"SendGrid answered with status {response.status}: {detail}")

    async def send(self, message: EmailMessage) -> bool:
        try:
            await self._post(message)
        except DeliveryError as e:
            logger.error(f"Failed to send email: {e}")
            return False
        except Exception:
            logger.exception("Unexpected error while sending email")
            return False

        logger.info(f"Alert email sent to {len(self._recipients)} recipient(s)")
        return True

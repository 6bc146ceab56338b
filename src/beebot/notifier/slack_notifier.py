"""
Slack chat notifier.

This module posts the run report to a Slack channel through the Web API
'chat.postMessage' method. Delivery failures are logged and reported to the
caller, never raised.
"""

import logging
from typing import Any, Dict

import aiohttp

from beebot.contracts import ChatNotifier
from beebot.domain import ChatMessage
from beebot.errors import DeliveryError

# Module logger
logger = logging.getLogger(__name__)

SLACK_POST_MESSAGE_URL = "https://slack.com/api/chat.postMessage"


class SlackNotifier(ChatNotifier):
    """
    A ChatNotifier posting messages with a Slack bot token.

    Slack answers most API errors with a 200 status, so a message is only
    considered delivered when the status is 2xx and the body reports 'ok'.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        token: str,
        channel: str,
        url: str = SLACK_POST_MESSAGE_URL,
    ) -> None:
        """
        Initializes the notifier.

        Args:
            session: An active aiohttp.ClientSession.
            token: The Slack bot token.
            channel: The destination channel identifier.
            url: The 'chat.postMessage' endpoint.
        """
        self._session: aiohttp.ClientSession = session
        self._token: str = token
        self._channel: str = channel
        self._url: str = url

    async def _post(self, message: ChatMessage) -> None:
        payload: Dict[str, Any] = {
            "channel": self._channel,
            "text": message.text,
            "blocks": message.blocks,
        }
        headers = {"Authorization": f"Bearer {self._token}"}

        async with self._session.post(self._url, json=payload, headers=headers) as response:
            if not 200 <= response.status < 300:
                raise DeliveryError(f"Slack answered with status {response.status}")
            body: Dict[str, Any] = await response.json(content_type=None)

        if not body.get("ok", False):
            raise DeliveryError(f"Slack rejected the message: {body.get('error', 'unknown error')}")

    async def send(self, message: ChatMessage) -> bool:
        try:
            await self._post(message)
        except DeliveryError as e:
            logger.error(f"Failed to send message to Slack: {e}")
            return False
        except Exception:
            logger.exception("Unexpected error while sending message to Slack")
            return False

        logger.info(f"Slack message sent to {self._channel}")
        return True

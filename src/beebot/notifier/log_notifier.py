"""
Notifiers used in test mode.

They log the composed payloads instead of delivering them, so a test run has
no outward side effect while still reporting a successful delivery.
"""

import json
import logging

from beebot.contracts import ChatNotifier, EmailNotifier
from beebot.domain import ChatMessage, EmailMessage

# Module logger
logger = logging.getLogger(__name__)


class LogChatNotifier(ChatNotifier):
    """Logs chat messages instead of posting them."""

    async def send(self, message: ChatMessage) -> bool:
        logger.info(f"[test mode] Slack message:\n{message.text}")
        logger.debug(f"[test mode] Slack blocks: {json.dumps(message.blocks, ensure_ascii=False)}")
        return True


class LogEmailNotifier(EmailNotifier):
    """Logs alert emails instead of sending them."""

    async def send(self, message: EmailMessage) -> bool:
        logger.info(f"[test mode] Email '{message.subject}':\n{message.body}")
        return True

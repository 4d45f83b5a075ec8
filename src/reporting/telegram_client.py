from typing import Any, Dict, Optional

import requests

from reporting.logger import get_logger
from reporting.models import OutboundMessage

logger = get_logger("telegram_client")


class TelegramClient:
    """
    Thin wrapper around the Bot API sendMessage method.

    The HTTP status is not checked: Telegram reports rejections in the
    JSON body with ok=false, and the caller decides what that means.
    """

    def __init__(self, api_base: str, session: Optional[requests.Session] = None):
        self.api_base = api_base.rstrip("/")
        self.session = session or requests.Session()

    def send_message(self, bot_token: str, message: OutboundMessage) -> Dict[str, Any]:
        url = f"{self.api_base}/bot{bot_token}/sendMessage"
        resp = self.session.post(url, json=message.as_payload())
        logger.info(
            "telegram.send_message",
            extra={"fields": {"status_code": resp.status_code, "chat_id": message.chat_id}},
        )
        return resp.json()

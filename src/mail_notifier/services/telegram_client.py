import logging
from typing import Any

import httpx

from mail_notifier.services.retry import with_retry

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.telegram.org"


class TelegramClient:
    def __init__(
        self,
        token: str,
        *,
        api_base: str = DEFAULT_API_BASE,
        retry_max_attempts: int = 3,
        retry_base_delay_seconds: float = 1.0,
        retry_max_delay_seconds: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.token = token
        self.api_base = api_base.rstrip("/")
        self.transport = transport
        self.retry_max_attempts = max(1, retry_max_attempts)
        self.retry_base_delay_seconds = max(0.1, retry_base_delay_seconds)
        self.retry_max_delay_seconds = max(self.retry_base_delay_seconds, retry_max_delay_seconds)

    async def send_message(self, chat_id: str, text: str, parse_mode: str = "Markdown") -> dict[str, Any]:
        if not self.token:
            raise RuntimeError("TELEGRAM_BOT_TOKEN is required to send Telegram messages")

        url = f"{self.api_base}/bot{self.token}/sendMessage"
        body = {"chat_id": chat_id, "text": text, "parse_mode": parse_mode}

        async def _call() -> httpx.Response:
            async with httpx.AsyncClient(timeout=20.0, transport=self.transport) as client:
                return await client.post(url, json=body)

        response = await with_retry(
            operation="telegram_send_message",
            call=_call,
            max_attempts=self.retry_max_attempts,
            base_delay_seconds=self.retry_base_delay_seconds,
            max_delay_seconds=self.retry_max_delay_seconds,
            logger=logger,
        )
        payload = response.json()
        logger.info(
            "Sent Telegram message",
            extra={
                "event": "telegram_message_sent",
                "chat_id": chat_id,
                "message_id": (payload.get("result") or {}).get("message_id"),
            },
        )
        return payload

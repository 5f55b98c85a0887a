"""
Notificaciones por Telegram (Bot API sendMessage)

Son solo informativas: un fallo se loguea y nunca se propaga.
"""

import logging
from typing import Optional

import httpx

from akari.core.config import get_settings

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"


class TelegramNotifier:
    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client

    async def send_message(self, chat_id: str, text: str) -> bool:
        """Envía un mensaje. Retorna True si Telegram lo aceptó."""
        settings = get_settings()

        if not settings.telegram_notifications or not chat_id:
            return False

        url = f"{TELEGRAM_API_URL}/bot{settings.telegram_bot_token}/sendMessage"
        payload = {"chat_id": chat_id, "text": text, "parse_mode": "HTML"}

        try:
            if self.client is not None:
                response = await self.client.post(url, json=payload, timeout=10)
            else:
                async with httpx.AsyncClient(timeout=10) as client:
                    response = await client.post(url, json=payload)
            response.raise_for_status()
            return True
        except httpx.HTTPError as e:
            logger.warning(f"⚠️ Telegram notification to {chat_id} failed: {e}")
            return False

"""
Telegram transport for the command router.

Talks to the Bot API with httpx using long polling: text messages and
callback queries go to the router, photos go through the receipt pipeline.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Tuple

import httpx

from pricebot.bot.router import BotReply, CommandRouter
from pricebot.config import settings

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 4096
POLL_ERROR_DELAY = 5.0


class TelegramError(Exception):
    """The Bot API answered with ok=false."""


class TelegramClient:
    """Minimal Bot API client: updates, messages, callback answers, file download."""

    def __init__(
        self,
        token: str,
        api_url: Optional[str] = None,
        poll_timeout: Optional[int] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        api_url = (api_url or settings.TELEGRAM_API_URL).rstrip("/")
        self.poll_timeout = poll_timeout if poll_timeout is not None else settings.TELEGRAM_POLL_TIMEOUT
        self.base_url = f"{api_url}/bot{token}"
        self.file_url = f"{api_url}/file/bot{token}"
        # Read timeout must outlast the long poll
        timeout = httpx.Timeout(self.poll_timeout + 10, connect=10.0)
        self.client = http_client or httpx.Client(timeout=timeout)

    def _call(self, method: str, **params: Any) -> Any:
        response = self.client.post(f"{self.base_url}/{method}", json=params)
        try:
            payload = response.json()
        except ValueError:
            response.raise_for_status()
            raise TelegramError(f"{method}: response is not JSON")

        if not payload.get("ok"):
            raise TelegramError(f"{method}: {payload.get('description', 'unknown error')}")
        return payload["result"]

    def get_updates(self, offset: Optional[int] = None) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {
            "timeout": self.poll_timeout,
            "allowed_updates": ["message", "callback_query"],
        }
        if offset is not None:
            params["offset"] = offset
        return self._call("getUpdates", **params)

    def send_message(
        self, chat_id: int, text: str, buttons: Optional[List[Tuple[str, str]]] = None
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"chat_id": chat_id, "text": text[:MAX_MESSAGE_LENGTH]}
        if buttons:
            params["reply_markup"] = {
                "inline_keyboard": [
                    [{"text": label[:64], "callback_data": data}] for label, data in buttons
                ]
            }
        return self._call("sendMessage", **params)

    def answer_callback_query(self, callback_query_id: str) -> None:
        self._call("answerCallbackQuery", callback_query_id=callback_query_id)

    def download_file(self, file_id: str) -> bytes:
        file_info = self._call("getFile", file_id=file_id)
        file_path = file_info["file_path"]
        logger.info(f"Downloading file from Telegram: {file_path}")

        response = self.client.get(f"{self.file_url}/{file_path}")
        response.raise_for_status()
        return response.content

    def close(self) -> None:
        self.client.close()


class TelegramBot:
    """Long-polling loop feeding updates to a CommandRouter."""

    def __init__(self, client: TelegramClient, router: CommandRouter):
        self.client = client
        self.router = router
        self.offset: Optional[int] = None

    def reply(self, chat_id: int, reply: BotReply) -> None:
        self.client.send_message(chat_id, reply.text, reply.buttons)

    def handle_update(self, update: Dict[str, Any]) -> None:
        if "message" in update:
            message = update["message"]
            chat_id = message["chat"]["id"]
            if "text" in message:
                self.reply(chat_id, self.router.handle_text(message["text"]))
            elif message.get("photo"):
                self.handle_photo(chat_id, message["photo"])
        elif "callback_query" in update:
            query = update["callback_query"]
            self.client.answer_callback_query(query["id"])
            if query.get("message") and query.get("data"):
                chat_id = query["message"]["chat"]["id"]
                self.reply(chat_id, self.router.handle_callback(query["data"]))

    def handle_photo(self, chat_id: int, photo_sizes: List[Dict[str, Any]]) -> None:
        self.client.send_message(chat_id, "🔄 Processing receipt image...")

        # Sizes come smallest first; the largest gives OCR the most to work with
        photo = photo_sizes[-1]
        try:
            data = self.client.download_file(photo["file_id"])
        except (httpx.HTTPError, TelegramError) as e:
            logger.error(f"File download error: {e}")
            self.client.send_message(chat_id, "❌ File processing error. Please try again.")
            return

        file_name = f"receipt_{int(time.time() * 1000)}.jpg"
        logger.info(f"Processing receipt with size: {len(data)} bytes")
        self.reply(chat_id, self.router.handle_photo(data, file_name, "image/jpeg"))

    def poll_once(self) -> int:
        """Fetch and handle one batch of updates. Returns how many were handled."""
        updates = self.client.get_updates(self.offset)
        for update in updates:
            self.offset = update["update_id"] + 1
            try:
                self.handle_update(update)
            except (httpx.HTTPError, TelegramError) as e:
                logger.error(f"Error sending message: {e}")
            except Exception:
                logger.exception(f"Skipping update {update.get('update_id')} that could not be handled")
        return len(updates)

    def run_forever(self) -> None:
        logger.info("Telegram bot started, polling for updates")
        while True:
            try:
                self.poll_once()
            except (httpx.HTTPError, TelegramError) as e:
                logger.error(f"Polling failed: {e}; next poll in {POLL_ERROR_DELAY}s")
                time.sleep(POLL_ERROR_DELAY)
            except Exception:
                logger.exception(f"Unexpected polling error; next poll in {POLL_ERROR_DELAY}s")
                time.sleep(POLL_ERROR_DELAY)

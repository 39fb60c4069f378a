"""
Run the Telegram bot: python -m pricebot.bot
"""

import logging
import sys

from pricebot.bot.router import CommandRouter
from pricebot.bot.telegram import TelegramBot, TelegramClient
from pricebot.config import settings
from pricebot.database import init_db
from pricebot.logger import setup_logging
from pricebot.services.ocr_service import OcrEngine
from pricebot.services.receipt_service import ReceiptPipeline

logger = logging.getLogger("pricebot.bot")


def main() -> int:
    setup_logging()

    if not settings.TELEGRAM_BOT_TOKEN:
        logger.error("TELEGRAM_BOT_TOKEN is not set")
        return 1

    init_db()
    engine = OcrEngine()
    if not engine.is_available():
        logger.warning("Tesseract is not available; receipt photos will be rejected")

    router = CommandRouter(pipeline=ReceiptPipeline(engine))
    client = TelegramClient(settings.TELEGRAM_BOT_TOKEN)
    try:
        TelegramBot(client, router).run_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down bot...")
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Chat command router.

Turns one line of chat text, one callback payload or one photo into a
plain-text reply. Transport-independent: the Telegram client only moves
updates in and replies out.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, ContextManager, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from pricebot.database import get_db_context
from pricebot.exceptions import (
    InvalidInputError,
    NotFoundError,
    PriceBotError,
    ServiceUnavailableError,
    StorageError,
)
from pricebot.models.price import GoodsPrice
from pricebot.models.receipt import Receipt
from pricebot.services.catalog_service import good_service, shop_service
from pricebot.services.price_service import parse_currency, price_service
from pricebot.services.receipt_service import ReceiptPipeline, receipt_service

logger = logging.getLogger(__name__)

COMMAND_MARKER = "/"
SHOP_CALLBACK_PREFIX = "shop_"
GOOD_CALLBACK_PREFIX = "good_"

UNKNOWN_COMMAND = "Unknown command. Use /help to see available commands."

WELCOME_MESSAGE = (
    "🎉 Welcome to Daily Shops Bot!\n\n"
    "I can help you manage shops and goods. Here are some commands:\n\n"
    "📋 /help - Show all available commands\n"
    "🏪 /shops - List all shops\n"
    "🛍️ /goods - List all goods\n"
    "➕ /addshop <name> - Add a new shop\n"
    "➕ /addgood <name> - Add a new good\n"
    "💰 /setprice <goodId> <shopId> <price> - Set price for good\n"
    "🔍 /searchshop <name> - Search shops\n"
    "🔍 /searchgood <name> - Search goods\n"
    "💵 /prices <goodId> - Show all prices for good\n"
    "🏆 /cheapest <goodId> - Show cheapest price for good\n"
    "🧾 /receipts - List all receipts\n"
    "🔍 /searchreceipt <text> - Search receipts by text\n"
    "📸 Send photo of receipt to process it"
)

HELP_MESSAGE = (
    "🤖 Available Commands:\n\n"
    "🏪 Shop Management:\n"
    "• /shops - List all shops\n"
    "• /addshop <name> - Add a new shop\n"
    "• /searchshop <name> - Search shops by name\n\n"
    "🛍️ Good Management:\n"
    "• /goods - List all goods\n"
    "• /addgood <name> - Add a new good\n"
    "• /searchgood <name> - Search goods by name\n\n"
    "💰 Price Management:\n"
    "• /setprice <goodId> <shopId> <price> [currency] - Set price for good\n"
    "• /prices <goodId> - Show all prices for good\n"
    "• /cheapest <goodId> - Show cheapest price for good\n\n"
    "🧾 Receipt Management:\n"
    "• /receipts - List all receipts\n"
    "• /searchreceipt <text> - Search receipts by text\n"
    "• Send photo of receipt to process it\n\n"
    "💡 Examples:\n"
    "• /addshop Electronics Store\n"
    "• /addgood Smartphone\n"
    "• /setprice good123 shop456 999.99\n"
    "• /prices good123\n"
    "• /cheapest good123\n"
    "• /searchreceipt milk"
)

# Preview lengths for receipt text in listings and search results
LIST_PREVIEW_CHARS = 50
SEARCH_PREVIEW_CHARS = 100


@dataclass
class BotReply:
    """Text to send back, with optional inline buttons as (label, callback_data)."""

    text: str
    buttons: List[Tuple[str, str]] = field(default_factory=list)


def parse_command(text: str) -> Tuple[str, str]:
    """
    Split "/cmd rest of line" into ("/cmd", "rest of line").

    The name is lower-cased and a trailing "@botname" is dropped.
    """
    parts = text.strip().split(maxsplit=1)
    name = parts[0].lower().split("@", 1)[0]
    args = parts[1] if len(parts) > 1 else ""
    return name, args


def _name(entity, entity_id: str) -> str:
    # Prices may outlive the good or shop they point to
    return entity.name if entity is not None else f"<deleted {entity_id}>"


def _preview(text: str, limit: int) -> str:
    return text[:limit] + "..." if len(text) > limit else text


def _format_date(receipt: Receipt) -> str:
    return receipt.created_at.strftime("%Y-%m-%d %H:%M")


Handler = Callable[[Session, str], BotReply]


class CommandRouter:
    """Static table from command name to handler."""

    def __init__(
        self,
        pipeline: Optional[ReceiptPipeline] = None,
        session_factory: Callable[[], ContextManager[Session]] = get_db_context,
    ):
        self.pipeline = pipeline
        self.session_factory = session_factory
        self.commands: Dict[str, Handler] = {
            "/start": self.start,
            "/help": self.help,
            "/shops": self.list_shops,
            "/goods": self.list_goods,
            "/addshop": self.add_shop,
            "/addgood": self.add_good,
            "/searchshop": self.search_shops,
            "/searchgood": self.search_goods,
            "/setprice": self.set_price,
            "/prices": self.prices,
            "/cheapest": self.cheapest,
            "/receipts": self.receipts,
            "/searchreceipt": self.search_receipts,
        }

    # --- Entry points ---

    def handle_text(self, text: str) -> BotReply:
        if not text.startswith(COMMAND_MARKER):
            return BotReply(
                f"I received your message: {text}\nUse /help to see available commands."
            )

        name, args = parse_command(text)
        handler = self.commands.get(name)
        if handler is None:
            return BotReply(UNKNOWN_COMMAND)

        logger.info(f"Handling command {name}")
        return self._run(handler, args, f"Error handling {name}")

    def handle_callback(self, data: str) -> BotReply:
        if data.startswith(SHOP_CALLBACK_PREFIX):
            return self._run(self.shop_details, data[len(SHOP_CALLBACK_PREFIX):], "Error showing shop")
        if data.startswith(GOOD_CALLBACK_PREFIX):
            return self._run(self.good_details, data[len(GOOD_CALLBACK_PREFIX):], "Error showing good")
        return BotReply(UNKNOWN_COMMAND)

    def handle_photo(self, data: bytes, file_name: str, content_type: str = "image/jpeg") -> BotReply:
        if self.pipeline is None:
            return BotReply("❌ OCR service is not available. Please check Tesseract installation.")

        try:
            with self.session_factory() as db:
                receipt = self.pipeline.process(db, data, file_name, content_type)
                return BotReply(
                    "✅ Receipt processed successfully!\n\n"
                    f"📄 ID: {receipt.id}\n"
                    f"📁 File: {receipt.file_name}\n"
                    f"📅 Date: {_format_date(receipt)}\n\n"
                    "📝 Recognized text:\n"
                    f"{receipt.processed_text}"
                )
        except ServiceUnavailableError:
            return BotReply("❌ OCR service is not available. Please check Tesseract installation.")
        except InvalidInputError as e:
            logger.error(f"Invalid file format: {e.message}")
            return BotReply("❌ Invalid image format. Please send a valid image file.")
        except StorageError as e:
            logger.error(f"File processing error: {e.message}")
            return BotReply("❌ File processing error. Please try again.")
        except PriceBotError as e:
            logger.error(f"OCR processing error: {e.message}")
            return BotReply("❌ OCR processing failed. Please check if Tesseract is installed correctly.")
        except Exception:
            logger.exception("Error processing receipt photo")
            return BotReply("❌ Unexpected error processing receipt. Please try again.")

    def _run(self, handler: Handler, args: str, error_context: str) -> BotReply:
        try:
            with self.session_factory() as db:
                return handler(db, args)
        except PriceBotError as e:
            logger.warning(f"{error_context}: {e.message}")
            return BotReply(f"❌ {e.message}")
        except Exception:
            logger.exception(error_context)
            return BotReply("❌ Something went wrong. Please try again.")

    # --- Commands ---

    def start(self, db: Session, args: str) -> BotReply:
        return BotReply(WELCOME_MESSAGE)

    def help(self, db: Session, args: str) -> BotReply:
        return BotReply(HELP_MESSAGE)

    def list_shops(self, db: Session, args: str) -> BotReply:
        shops = shop_service.list_all(db)
        if not shops:
            return BotReply("No shops found. Use /addshop to create your first shop!")

        lines = ["🏪 Available Shops:\n"]
        lines += [f"• {shop.name} (ID: {shop.id})" for shop in shops]
        buttons = [(shop.name, f"{SHOP_CALLBACK_PREFIX}{shop.id}") for shop in shops]
        return BotReply("\n".join(lines), buttons)

    def list_goods(self, db: Session, args: str) -> BotReply:
        goods = good_service.list_all(db)
        if not goods:
            return BotReply("No goods found. Use /addgood to create your first good!")

        lines = ["🛍️ Available Goods:\n"]
        lines += [f"• {good.name} (ID: {good.id})" for good in goods]
        buttons = [(good.name, f"{GOOD_CALLBACK_PREFIX}{good.id}") for good in goods]
        return BotReply("\n".join(lines), buttons)

    def add_shop(self, db: Session, args: str) -> BotReply:
        if not args.strip():
            return BotReply("❌ Please provide a shop name.\nUsage: /addshop <shop name>")

        shop = shop_service.create(db, args)
        return BotReply(f"✅ Shop '{shop.name}' created successfully!\nID: {shop.id}")

    def add_good(self, db: Session, args: str) -> BotReply:
        if not args.strip():
            return BotReply("❌ Please provide a good name.\nUsage: /addgood <good name>")

        good = good_service.create(db, args)
        return BotReply(f"✅ Good '{good.name}' created successfully!\nID: {good.id}")

    def search_shops(self, db: Session, args: str) -> BotReply:
        term = args.strip()
        if not term:
            return BotReply("❌ Please provide a search term.\nUsage: /searchshop <search term>")

        shops = shop_service.search(db, term)
        if not shops:
            return BotReply(f"🔍 No shops found matching '{term}'")

        lines = [f"🔍 Shops matching '{term}':\n"]
        lines += [f"• {shop.name} (ID: {shop.id})" for shop in shops]
        return BotReply("\n".join(lines))

    def search_goods(self, db: Session, args: str) -> BotReply:
        term = args.strip()
        if not term:
            return BotReply("❌ Please provide a search term.\nUsage: /searchgood <search term>")

        goods = good_service.search(db, term)
        if not goods:
            return BotReply(f"🔍 No goods found matching '{term}'")

        lines = [f"🔍 Goods matching '{term}':\n"]
        lines += [f"• {good.name} (ID: {good.id})" for good in goods]
        return BotReply("\n".join(lines))

    def shop_details(self, db: Session, shop_id: str) -> BotReply:
        shop = shop_service.get(db, shop_id)
        if shop is None:
            return BotReply("❌ Shop not found.")
        return BotReply(f"🏪 Shop Details:\n\nName: {shop.name}\nID: {shop.id}")

    def good_details(self, db: Session, good_id: str) -> BotReply:
        good = good_service.get(db, good_id)
        if good is None:
            return BotReply("❌ Good not found.")
        return BotReply(f"🛍️ Good Details:\n\nName: {good.name}\nID: {good.id}")

    def set_price(self, db: Session, args: str) -> BotReply:
        parts = args.split()
        if len(parts) < 3:
            return BotReply(
                "❌ Please provide good ID, shop ID, and price.\n"
                "Usage: /setprice <goodId> <shopId> <price>"
            )

        good_id, shop_id, amount = parts[:3]
        try:
            currency = parse_currency(parts[3] if len(parts) > 3 else None)
        except InvalidInputError:
            return BotReply("❌ Invalid currency. Please use a 3-letter code (e.g., USD)")

        try:
            price = price_service.set_price(db, good_id, shop_id, amount, currency)
        except InvalidInputError:
            return BotReply("❌ Invalid price format. Please use numbers (e.g., 999.99)")
        except NotFoundError:
            return BotReply("❌ Error setting price. Please check good ID and shop ID.")

        return BotReply(
            "✅ Price set successfully!\n"
            f"Good: {_name(price.good, price.good_id)}\n"
            f"Shop: {_name(price.shop, price.shop_id)}\n"
            f"Price: {price.price} {price.currency}\n"
            f"ID: {price.id}"
        )

    def prices(self, db: Session, args: str) -> BotReply:
        good_id = args.strip()
        if not good_id:
            return BotReply("❌ Please provide a good ID.\nUsage: /prices <goodId>")

        prices: List[GoodsPrice] = price_service.for_good(db, good_id)
        if not prices:
            return BotReply(f"🔍 No prices found for good ID: {good_id}")

        lines = [f"💵 Prices for good '{_name(prices[0].good, good_id)}':\n"]
        lines += [
            f"🏪 {_name(p.shop, p.shop_id)}: {p.price} {p.currency}" for p in prices
        ]
        return BotReply("\n".join(lines))

    def cheapest(self, db: Session, args: str) -> BotReply:
        good_id = args.strip()
        if not good_id:
            return BotReply("❌ Please provide a good ID.\nUsage: /cheapest <goodId>")

        price = price_service.cheapest(db, good_id)
        if price is None:
            return BotReply(f"🔍 No prices found for good ID: {good_id}")

        return BotReply(
            f"🏆 Cheapest price for '{_name(price.good, good_id)}':\n\n"
            f"🏪 Shop: {_name(price.shop, price.shop_id)}\n"
            f"💰 Price: {price.price}\n"
            f"💱 Currency: {price.currency}"
        )

    def receipts(self, db: Session, args: str) -> BotReply:
        receipts = receipt_service.list_all(db)
        if not receipts:
            return BotReply("📄 No receipts found. Send a photo of a receipt to process it!")

        blocks = ["🧾 Available Receipts:\n"]
        for receipt in receipts:
            blocks.append(
                f"📄 {receipt.file_name} (ID: {receipt.id})\n"
                f"📅 {_format_date(receipt)}\n"
                f"📝 {_preview(receipt.processed_text, LIST_PREVIEW_CHARS)}\n"
            )
        return BotReply("\n".join(blocks))

    def search_receipts(self, db: Session, args: str) -> BotReply:
        text = args.strip()
        if not text:
            return BotReply("❌ Please provide search text.\nUsage: /searchreceipt <text>")

        receipts = receipt_service.search_text(db, text)
        if not receipts:
            return BotReply(f"🔍 No receipts found matching '{text}'")

        blocks = [f"🔍 Receipts matching '{text}':\n"]
        for receipt in receipts:
            blocks.append(
                f"📄 {receipt.file_name} (ID: {receipt.id})\n"
                f"📅 {_format_date(receipt)}\n"
                f"📝 {_preview(receipt.processed_text, SEARCH_PREVIEW_CHARS)}\n"
            )
        return BotReply("\n".join(blocks))

"""
Tests for the Telegram transport with the Bot API mocked out
"""
import json
from unittest.mock import MagicMock

import httpx
import pytest

from pricebot.bot.router import BotReply
from pricebot.bot.telegram import POLL_ERROR_DELAY, TelegramBot, TelegramClient, TelegramError

API = "https://telegram.test"


def make_client(handler) -> TelegramClient:
    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    return TelegramClient("TOKEN", api_url=API, poll_timeout=0, http_client=http_client)


def ok(result):
    return httpx.Response(200, json={"ok": True, "result": result})


class TestTelegramClient:

    def test_send_message_with_buttons(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return ok({"message_id": 1})

        client = make_client(handler)
        client.send_message(42, "hi", [("Shop", "shop_1")])

        assert seen["url"] == f"{API}/botTOKEN/sendMessage"
        assert seen["body"] == {
            "chat_id": 42,
            "text": "hi",
            "reply_markup": {"inline_keyboard": [[{"text": "Shop", "callback_data": "shop_1"}]]},
        }

    def test_long_message_truncated(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return ok({})

        make_client(handler).send_message(1, "a" * 5000)

        assert len(seen["body"]["text"]) == 4096
        assert "reply_markup" not in seen["body"]

    def test_api_error_raised(self):
        def handler(request):
            return httpx.Response(400, json={"ok": False, "description": "Bad Request: chat not found"})

        with pytest.raises(TelegramError, match="chat not found"):
            make_client(handler).send_message(1, "hi")

    def test_get_updates_offset(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return ok([{"update_id": 7}])

        updates = make_client(handler).get_updates(offset=7)

        assert updates == [{"update_id": 7}]
        assert seen["body"]["offset"] == 7
        assert seen["body"]["allowed_updates"] == ["message", "callback_query"]

    def test_download_file(self):
        def handler(request):
            if request.url.path.endswith("/getFile"):
                return ok({"file_id": "F", "file_path": "photos/file_1.jpg"})
            assert str(request.url) == f"{API}/file/botTOKEN/photos/file_1.jpg"
            return httpx.Response(200, content=b"jpeg-bytes")

        assert make_client(handler).download_file("F") == b"jpeg-bytes"


class TestTelegramBot:

    @pytest.fixture
    def client(self):
        return MagicMock(spec=TelegramClient)

    @pytest.fixture
    def router(self):
        router = MagicMock()
        router.handle_text.return_value = BotReply("pong", [("A", "shop_a")])
        router.handle_callback.return_value = BotReply("details")
        router.handle_photo.return_value = BotReply("✅ done")
        return router

    def test_text_message(self, client, router):
        bot = TelegramBot(client, router)

        bot.handle_update({"update_id": 1, "message": {"chat": {"id": 5}, "text": "/shops"}})

        router.handle_text.assert_called_once_with("/shops")
        client.send_message.assert_called_once_with(5, "pong", [("A", "shop_a")])

    def test_callback_query(self, client, router):
        bot = TelegramBot(client, router)

        bot.handle_update({
            "update_id": 2,
            "callback_query": {"id": "cb1", "data": "shop_a", "message": {"chat": {"id": 5}}},
        })

        client.answer_callback_query.assert_called_once_with("cb1")
        router.handle_callback.assert_called_once_with("shop_a")
        client.send_message.assert_called_once_with(5, "details", [])

    def test_photo_uses_largest_size(self, client, router):
        client.download_file.return_value = b"img"
        bot = TelegramBot(client, router)

        bot.handle_update({
            "update_id": 3,
            "message": {"chat": {"id": 5}, "photo": [{"file_id": "small"}, {"file_id": "large"}]},
        })

        client.download_file.assert_called_once_with("large")
        data, file_name, content_type = router.handle_photo.call_args.args
        assert data == b"img"
        assert file_name.startswith("receipt_") and file_name.endswith(".jpg")
        assert content_type == "image/jpeg"
        assert client.send_message.call_args_list[0].args == (5, "🔄 Processing receipt image...")

    def test_photo_download_failure(self, client, router):
        client.download_file.side_effect = TelegramError("getFile: file is too big")
        bot = TelegramBot(client, router)

        bot.handle_photo(5, [{"file_id": "x"}])

        router.handle_photo.assert_not_called()
        client.send_message.assert_called_with(5, "❌ File processing error. Please try again.")

    def test_poll_once_advances_offset(self, client, router):
        client.get_updates.return_value = [
            {"update_id": 10, "message": {"chat": {"id": 1}, "text": "a"}},
            {"update_id": 11, "message": {"chat": {"id": 1}, "text": "b"}},
        ]
        bot = TelegramBot(client, router)

        assert bot.poll_once() == 2
        assert bot.offset == 12
        client.get_updates.assert_called_once_with(None)

    def test_poll_once_survives_send_failure(self, client, router):
        client.get_updates.return_value = [{"update_id": 10, "message": {"chat": {"id": 1}, "text": "a"}}]
        client.send_message.side_effect = httpx.ConnectError("down")
        bot = TelegramBot(client, router)

        assert bot.poll_once() == 1
        assert bot.offset == 11

    def test_poll_once_skips_malformed_update(self, client, router):
        client.get_updates.return_value = [
            {"update_id": 20, "message": {"chat": {"id": 1}, "photo": [{"width": 90}]}},
            {"update_id": 21, "message": {"chat": {"id": 1}, "text": "/help"}},
        ]
        bot = TelegramBot(client, router)

        assert bot.poll_once() == 2
        assert bot.offset == 22
        router.handle_text.assert_called_once_with("/help")

    def test_run_forever_survives_unexpected_error(self, client, router, monkeypatch):
        client.get_updates.side_effect = [ValueError("bad payload"), KeyboardInterrupt()]
        sleeps = []
        monkeypatch.setattr("pricebot.bot.telegram.time.sleep", sleeps.append)
        bot = TelegramBot(client, router)

        with pytest.raises(KeyboardInterrupt):
            bot.run_forever()

        assert client.get_updates.call_count == 2
        assert sleeps == [POLL_ERROR_DELAY]

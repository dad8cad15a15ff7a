"""Tests for TUI formatting helpers and the chat application."""
import logging
from datetime import datetime

import pytest

from relaychat.client import ConnectionState, ConversationMessage, MessageKind, MessageRole
from relaychat.ui import LogLevel, RelayChatApp
from relaychat.ui.formatting import message_body, message_classes, message_header, status_display
from relaychat.ui.log_handler import component_name
from relaychat.ui.widgets import ChatHistoryWidget, ChatInputBar, StatusBar

from support import ScriptedTransport, make_controller


class TestStatusDisplay:
    """Tests for the connection status line."""

    def test_idle_hides_status(self):
        assert status_display(ConnectionState.IDLE, 0, 3) is None

    @pytest.mark.parametrize(
        "state,retry,expected",
        [
            (ConnectionState.CONNECTING, 0, ("Connecting...", "-connecting")),
            (ConnectionState.STREAMING, 0, ("Receiving response...", "-streaming")),
            (ConnectionState.RETRYING, 2, ("Retrying (2/3)...", "-retrying")),
            (ConnectionState.ERROR, 3, ("Connection failed", "-error")),
        ],
    )
    def test_busy_states(self, state, retry, expected):
        assert status_display(state, retry, 3) == expected

    def test_busy_flag(self):
        busy = {state for state in ConnectionState if state.is_busy}
        assert busy == {ConnectionState.CONNECTING, ConnectionState.STREAMING, ConnectionState.RETRYING}


class TestMessageFormatting:
    """Tests for message presentation."""

    def test_classes(self):
        user = ConversationMessage(role=MessageRole.USER, text="hi")
        warning = ConversationMessage(role=MessageRole.SYSTEM, text="w", kind=MessageKind.WARNING)
        assert message_classes(user) == "chat-message user-message"
        assert message_classes(warning) == "chat-message system-message -warning"

    def test_header(self):
        message = ConversationMessage(
            role=MessageRole.ASSISTANT, text="4", timestamp=datetime(2024, 1, 1, 9, 5, 7)
        )
        assert message_header(message) == "< Assistant [09:05:07]"

    def test_empty_reply_shows_ellipsis_while_typing(self):
        reply = ConversationMessage(role=MessageRole.ASSISTANT)
        assert message_body(reply, typing=True) == "..."
        assert message_body(reply) == ""
        reply.text = "4"
        assert message_body(reply, typing=True) == "4"


class TestLogging:
    """Tests for log panel helpers."""

    def test_log_levels(self):
        assert LogLevel.from_string("WARNING") == logging.WARNING
        assert LogLevel.from_string("bogus") == LogLevel.DEBUG
        assert LogLevel.name(logging.ERROR) == "ERROR"

    def test_component_name(self):
        assert component_name("relaychat.client.session") == "session"
        assert component_name("relaychat") == "relaychat"


class TestRelayChatApp:
    """Smoke tests driving the app with a scripted transport."""

    @pytest.mark.asyncio
    async def test_question_is_answered(self):
        controller = make_controller(ScriptedTransport(["4"]))
        app = RelayChatApp(controller)

        async with app.run_test() as pilot:
            app.query_one(ChatInputBar).post_message(ChatInputBar.Submitted("What is 2+2?"))
            await pilot.pause()
            await app.workers.wait_for_complete()
            await pilot.pause()

            chat = app.query_one(ChatHistoryWidget)
            assert chat.get_last_response() == "4"
            assert not app.query_one(StatusBar).display
            assert app.query_one(ChatInputBar).enabled

    @pytest.mark.asyncio
    async def test_offline_banner_follows_network(self):
        controller = make_controller(ScriptedTransport(["unused"]))
        app = RelayChatApp(controller)

        async with app.run_test() as pilot:
            controller.network.set_online(False)
            await pilot.pause()
            assert app.query_one("#network-banner").display
            assert not app.query_one(ChatInputBar).enabled

            controller.network.set_online(True)
            await pilot.pause()
            assert not app.query_one("#network-banner").display
            assert app.query_one(ChatInputBar).enabled

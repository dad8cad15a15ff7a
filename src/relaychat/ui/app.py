"""Main Textual TUI application.

Wires the session controller, transcript and network monitor to the
widgets and handles user interaction. Everything runs on Textual's event
loop, so controller callbacks update widgets directly.
"""

import asyncio
import contextlib
import logging

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Footer, Header, Static

from ..client import (
    ConnectionState,
    ConnectivityProbe,
    HttpxTransport,
    NetworkMonitor,
    SessionController,
    SessionOutcome,
)
from ..errors import SessionActiveError
from ..logging_config import LOGGER_NAME
from .config import FOOTNOTE_TEXT, LogLevel
from .log_handler import PanelLogHandler
from .styles import APP_CSS
from .themes import CATPPUCCIN_MOCHA
from .widgets import ChatHistoryWidget, ChatInputBar, LogPanel, NetworkBanner, StatusBar


class RelayChatApp(App):
    """Textual TUI for streaming chat with the relaychat gateway."""

    CSS = APP_CSS
    TITLE = "Relaychat"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("escape", "cancel_request", "Cancel"),
        Binding("ctrl+k", "clear_chat", "Clear Chat"),
        Binding("ctrl+r", "copy_last_response", "Copy Response"),
        Binding("ctrl+d", "toggle_log", "Log"),
    ]

    def __init__(
        self,
        controller: SessionController,
        probe: ConnectivityProbe | None = None,
        log_level: str | None = None,
        gateway: str = "",
    ) -> None:
        super().__init__()
        self.controller = controller
        self._probe = probe
        self._log_level = log_level
        self._gateway = gateway
        self._log_handler: PanelLogHandler | None = None
        self._unsubscribers: list = []

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield NetworkBanner(id="network-banner")
        yield StatusBar(self.controller.policy.max_retries, id="status-bar")
        with Horizontal(id="main-area"):
            yield ChatHistoryWidget(id="chat-history")
            yield LogPanel(id="log-panel")
        yield ChatInputBar(id="chat-input-bar")
        yield Static(FOOTNOTE_TEXT, id="footnote")
        yield Footer()

    def on_mount(self) -> None:
        self.register_theme(CATPPUCCIN_MOCHA)
        self.theme = "catppuccin-mocha"
        self.sub_title = self._gateway

        log_panel = self.query_one("#log-panel", LogPanel)
        self._log_handler = PanelLogHandler(self, log_panel)
        logging.getLogger(LOGGER_NAME).addHandler(self._log_handler)
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            logging.getLogger(LOGGER_NAME).setLevel(log_panel.log_level)
            log_panel.show()

        chat = self.query_one("#chat-history", ChatHistoryWidget)
        banner = self.query_one("#network-banner", NetworkBanner)
        self._unsubscribers = [
            self.controller.transcript.subscribe(chat.apply_change),
            self.controller.subscribe(self._on_state_change),
            self.controller.network.subscribe(self._on_network_change),
        ]
        banner.set_online(self.controller.network.is_online)

        if self._probe is not None:
            self._probe.start()
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    async def on_unmount(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        if self._log_handler is not None:
            logging.getLogger(LOGGER_NAME).removeHandler(self._log_handler)
            self._log_handler = None
        if self._probe is not None:
            await self._probe.stop()
        await self.controller.aclose()

    def _refresh_input(self) -> None:
        busy = self.controller.state.is_busy or self.controller.is_active
        self.query_one("#chat-input-bar", ChatInputBar).set_enabled(
            not busy and self.controller.network.is_online
        )

    def _on_state_change(self, state: ConnectionState, retry_count: int) -> None:
        self.query_one("#status-bar", StatusBar).update_state(state, retry_count)
        self._refresh_input()

    def _on_network_change(self, online: bool) -> None:
        self.query_one("#network-banner", NetworkBanner).set_online(online)
        self._refresh_input()

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        self._ask(event.value)

    def on_status_bar_cancel_requested(self, event: StatusBar.CancelRequested) -> None:
        self.action_cancel_request()

    @work(exclusive=False, group="session")
    async def _ask(self, question: str) -> None:
        """Run one session as a background async worker."""
        try:
            outcome = await self.controller.submit(question)
        except SessionActiveError:
            self.notify("Still answering the previous question", severity="warning", timeout=3)
            return
        finally:
            self._refresh_input()

        if outcome == SessionOutcome.FAILED:
            self.notify("Connection failed", severity="error", timeout=5)

    def action_cancel_request(self) -> None:
        if self.controller.cancel():
            self.notify("Cancelled", severity="warning", timeout=2)

    def action_clear_chat(self) -> None:
        if self.controller.is_active:
            self.notify("Cancel the current request first", severity="warning", timeout=2)
            return
        self.controller.transcript.clear()
        self.notify("Chat cleared", timeout=2)

    def action_toggle_log(self) -> None:
        log_panel = self.query_one("#log-panel", LogPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_copy_last_response(self) -> None:
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Response copied")
        else:
            self.notify("No response to copy", severity="warning")


async def run_textual_tui(base_url: str, log_level: str | None = None) -> None:
    """Run the Textual TUI against a gateway.

    Args:
        base_url: Gateway base URL
        log_level: Log panel level (debug/info/warning/error), None to hide
    """
    network = NetworkMonitor()
    probe = ConnectivityProbe(network, base_url)
    transport = HttpxTransport(base_url)
    controller = SessionController(transport, network=network)
    app = RelayChatApp(controller, probe=probe, log_level=log_level, gateway=base_url)
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        with contextlib.suppress(Exception):
            await transport.aclose()

"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.

Layout, top to bottom: offline banner, connection status line, chat
history (with the optional log panel beside it), input bar, footnote.
"""

APP_CSS = """
Screen {
    layout: vertical;
    background: $background;
}

/* Offline banner */
#network-banner {
    display: none;
    width: 100%;
    height: 1;
    padding: 0 2;
    text-align: center;
    background: $error 25%;
    color: $error;
    text-style: bold;
}

/* Connection status line */
#status-bar {
    display: none;
    width: 100%;
    height: 3;
    padding: 0 2;
    align: center middle;
    background: $panel;
    border-bottom: solid $border;

    &.-connecting #status-text { color: $primary; }
    &.-streaming #status-text { color: $success; }
    &.-retrying #status-text { color: $warning; }
    &.-error #status-text { color: $error; }
}

#status-text {
    width: auto;
    height: 1;
    margin: 1 2 0 0;
    text-style: bold;
}

#cancel-btn {
    min-width: 10;
    height: 3;
}

/* Chat history and log */
#main-area {
    height: 1fr;
}

#chat-history {
    width: 3fr;
    height: 100%;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }
}

#log-panel {
    display: none;
    width: 2fr;
    height: 100%;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    margin-left: 1;
}

/* Messages */
.chat-message {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 0 2;
}

.message-header {
    height: auto;
    text-style: bold;
}

.message-content {
    height: auto;
    color: $foreground;
}

.user-message {
    border-left: tall $success;
    background: $success 8%;

    & .message-header { color: $success; }
}

.assistant-message {
    border-left: tall $secondary;
    background: $secondary 8%;

    & .message-header { color: $secondary; }
}

.system-message {
    width: 80%;
    margin: 0 0 1 4;
    border-left: tall $primary;
    background: $primary 8%;

    & .message-header { color: $primary; }

    &.-warning {
        border-left: tall $warning;
        background: $warning 10%;
        & .message-header { color: $warning; }
    }

    &.-error {
        border-left: tall $error;
        background: $error 10%;
        & .message-header { color: $error; }
    }
}

/* Input */
ChatInputBar {
    height: 5;
    border: round $primary 60%;
    background: $panel;

    &:focus-within {
        border: round $primary;
    }
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    padding: 0 1;
    background: transparent;
}

#send-btn {
    width: 10;
    height: 100%;
    margin: 0 0 0 1;
    text-style: bold;
}

#footnote {
    width: 100%;
    height: 1;
    text-align: center;
    color: $text-muted;
}

Header {
    background: $panel;
    color: $foreground;
}

HeaderTitle {
    color: $primary;
    text-style: bold;
}

Footer {
    background: $panel;
}
"""

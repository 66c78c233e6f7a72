"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.

Layout: header, transcript, optional log panel, input bar, footer,
stacked in one column.
"""

APP_CSS = """
/* ============================================
   Main Screen Layout - Single Column
   ============================================ */
Screen {
    layout: vertical;
    background: $background;
}

/* ============================================
   Chat History Panel - Primary Focus Area
   ============================================ */
#chat-history {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus {
        border: round $primary;
    }
}

/* ============================================
   Debug/Log Panel
   ============================================ */
#debug-panel {
    height: 10;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    overflow-y: scroll;
    overflow-x: auto;
    scrollbar-gutter: stable;
}

/* ============================================
   Chat Input Bar - Text Entry + Send
   ============================================ */
ChatInputBar {
    height: 5;
    padding: 1 0 0 0;
    border-top: solid $border;
    background: $panel;
}

#chat-input {
    width: 1fr;
    border: tall $primary 40%;
    background: transparent;

    &:focus {
        border: tall $primary;
    }
}

#send-btn {
    width: 10;
    min-width: 8;
    margin: 0 0 0 1;
    text-style: bold;
}

/* ============================================
   Chat Messages - Conversation Display
   ============================================ */
.chat-message {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 0 1;
    background: transparent;
}

/* User messages */
.user-message {
    border-left: tall $primary;

    &:hover {
        background: $primary 8%;
    }
}

/* Assistant messages, final and streaming */
.assistant-message, .streaming-message {
    border-left: tall $secondary;
}

.assistant-message:hover {
    background: $secondary 8%;
}

/* Notices and errors */
.system-message {
    color: $text-muted;
}

.error-message {
    border-left: tall $error;
}

.message-header {
    height: auto;
    padding: 0;
}

.message-content {
    height: auto;
    padding: 0;
    margin: 0;
}

Markdown {
    margin: 0;
    padding: 0;
}

/* ============================================
   Notification Toasts
   ============================================ */
Toast {
    background: $surface;
    border: tall $border;
    padding: 0 1;

    &.-information {
        border: tall $primary;
    }

    &.-warning {
        border: tall $warning;
    }

    &.-error {
        border: tall $error;
    }
}
"""

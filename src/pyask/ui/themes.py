"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)

The palette follows StyleConfig so both front ends look alike.
"""

from textual.theme import Theme

from .config import DEFAULT_STYLE

ASK_DARK = Theme(
    name="ask-dark",
    primary=DEFAULT_STYLE.primary_color,
    secondary=DEFAULT_STYLE.secondary_color,
    accent="#f9e2af",
    foreground="#d0d0d0",
    background="#101014",
    success=DEFAULT_STYLE.secondary_color,
    warning="#fab387",
    error=DEFAULT_STYLE.error_color,
    surface="#1a1a20",
    panel="#15151a",
    dark=True,
    variables={
        "block-cursor-foreground": "#101014",
        "block-cursor-background": DEFAULT_STYLE.primary_color,
        "block-cursor-text-style": "bold",
        "input-cursor-background": "#d0d0d0",
        "input-cursor-foreground": "#101014",
        "input-selection-background": f"{DEFAULT_STYLE.primary_color} 30%",
        "border": "#3a3a44",
        "border-blurred": "#2a2a30",
        "scrollbar": "#2a2a30",
        "scrollbar-hover": "#3a3a44",
        "scrollbar-active": DEFAULT_STYLE.primary_color,
        "scrollbar-background": "#15151a",
        "footer-foreground": "#a0a0a8",
        "footer-background": "#101014",
        "footer-key-foreground": "#f9e2af",
        "footer-key-background": "#2a2a30",
        "text-muted": DEFAULT_STYLE.muted_color,
    },
)

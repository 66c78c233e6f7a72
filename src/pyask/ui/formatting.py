"""Text formatting utilities shared by both front ends.

Hides the details of markdown rendering and text cleanup. Rendering never
fails the caller: anything Rich cannot handle falls back to plain text.
"""

import logging
import re

from rich.console import RenderableType
from rich.markdown import Markdown
from rich.text import Text

logger = logging.getLogger(__name__)


def clean_latex(text: str) -> str:
    """Convert LaTeX notation to plain text equivalents.

    Handles common LaTeX patterns that Rich cannot render:
    - \\( ... \\) inline math -> just the content
    - \\[ ... \\] display math -> just the content
    - $$...$$ display math -> just the content
    """
    text = re.sub(r'\\\(\s*', '', text)
    text = re.sub(r'\s*\\\)', '', text)
    text = re.sub(r'\\\[\s*', '', text)
    text = re.sub(r'\s*\\\]', '', text)
    text = re.sub(r'\$\$\s*', '', text)

    text = re.sub(r'\\frac\{([^}]*)\}\{([^}]*)\}', r'(\1)/(\2)', text)
    text = re.sub(r'\\sqrt\{([^}]*)\}', r'sqrt(\1)', text)
    text = re.sub(r'\\times', 'x', text)
    text = re.sub(r'\\cdot', '*', text)
    text = re.sub(r'\\leq', '<=', text)
    text = re.sub(r'\\geq', '>=', text)
    text = re.sub(r'\\neq', '!=', text)
    text = re.sub(r'\\text\{([^}]*)\}', r'\1', text)
    return text


def render_markdown(text: str) -> RenderableType:
    """Render a complete or partial reply as markdown.

    Returns plain Text if markdown parsing fails.
    """
    cleaned = clean_latex(text)
    try:
        return Markdown(cleaned)
    except Exception as exc:  # markdown-it can choke on pathological input
        logger.debug("Markdown rendering failed, using plain text: %s", exc)
        return Text(text, overflow="fold")


def render_text_styled(text: str, style: str = "") -> Text:
    """Render plain text with an optional style and folding.

    The text is never interpreted as Rich markup, so brackets in error
    bodies or model output are shown verbatim.
    """
    result = Text(text, overflow="fold")
    if style:
        result.stylize(style)
    return result

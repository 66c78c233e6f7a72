"""
pyask: chat with several LLM backends from the terminal.

One conversation model is shared by every backend; each provider hides its
own wire format, and the session layer drives either a blocking console
loop or a full-screen Textual interface.
"""

__version__ = "0.1.0"

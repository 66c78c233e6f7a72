from .anthropic import ClaudeProvider
from .deepseek import DeepSeekProvider
from .gemini import GeminiProvider
from .mistral import MistralProvider
from .openai import ChatGPTProvider, OpenAICompatibleProvider
from .qwen import QwenProvider

__all__ = [
    "ChatGPTProvider",
    "ClaudeProvider",
    "DeepSeekProvider",
    "GeminiProvider",
    "MistralProvider",
    "OpenAICompatibleProvider",
    "QwenProvider",
]

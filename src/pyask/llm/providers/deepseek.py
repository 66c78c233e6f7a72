from ..models import ModelDescriptor
from .openai import OpenAICompatibleProvider


class DeepSeekProvider(OpenAICompatibleProvider):
    """DeepSeek LLM provider using the OpenAI-compatible API."""

    name = "deepseek"
    display_name = "DeepSeek"
    base_url = "https://api.deepseek.com"
    fallback_models = (
        ModelDescriptor(id="deepseek-chat", display_name="DeepSeek Chat", description="General purpose chat model"),
        ModelDescriptor(id="deepseek-reasoner", display_name="DeepSeek Reasoner", description="Advanced reasoning model"),
    )

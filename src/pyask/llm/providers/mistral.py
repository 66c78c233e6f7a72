from ..models import ModelDescriptor
from .openai import OpenAICompatibleProvider


class MistralProvider(OpenAICompatibleProvider):
    """Mistral AI provider (OpenAI-compatible framing)."""

    name = "mistral"
    display_name = "Mistral"
    base_url = "https://api.mistral.ai"
    fallback_models = (
        ModelDescriptor(id="mistral-large-latest", display_name="Mistral Large", description="Most capable model"),
        ModelDescriptor(id="mistral-small-latest", display_name="Mistral Small", description="Fast and efficient"),
        ModelDescriptor(id="codestral-latest", display_name="Codestral", description="Code generation"),
    )

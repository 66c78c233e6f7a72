from typing import Any

from .base import LLMProvider
from .errors import UnknownProviderError
from .providers import (
    ChatGPTProvider,
    ClaudeProvider,
    DeepSeekProvider,
    GeminiProvider,
    MistralProvider,
    QwenProvider,
)

PROVIDER_CLASSES: dict[str, type[LLMProvider]] = {
    cls.name: cls
    for cls in (
        GeminiProvider,
        ClaudeProvider,
        ChatGPTProvider,
        DeepSeekProvider,
        MistralProvider,
        QwenProvider,
    )
}

SUPPORTED_PROVIDERS: tuple[str, ...] = tuple(PROVIDER_CLASSES)

PROVIDER_ALIASES = {
    "openai": "chatgpt",
    "gpt": "chatgpt",
    "anthropic": "claude",
    "dashscope": "qwen",
}

# Qwen defaults to its balanced tier rather than the first listed model
DEFAULT_MODELS: dict[str, str] = {
    name: cls.fallback_models[0].id for name, cls in PROVIDER_CLASSES.items()
}
DEFAULT_MODELS["qwen"] = "qwen-plus"


def canonical_provider_name(provider: str) -> str:
    """Map a provider name or alias to its canonical name.

    Raises:
        UnknownProviderError: If the name is not supported
    """
    name = provider.strip().lower()
    name = PROVIDER_ALIASES.get(name, name)
    if name not in PROVIDER_CLASSES:
        raise UnknownProviderError(provider, SUPPORTED_PROVIDERS)
    return name


def create_llm_provider(provider: str, api_key: str, model: str = "", **config: Any) -> LLMProvider:
    """Create an LLM provider instance.

    This factory function hides the instantiation logic for different providers.

    Args:
        provider: Provider name ('gemini', 'claude', 'chatgpt', 'deepseek',
            'mistral', 'qwen') or an alias ('openai', 'anthropic')
        api_key: Credential for the backend
        model: Model id (empty uses the provider's default model)
        **config: Passed through to the provider
            - http_client: httpx.Client | None
            - settings: TransportSettings | None

    Returns:
        Initialized LLM provider instance

    Raises:
        UnknownProviderError: If provider type is not supported

    Examples:
        >>> provider = create_llm_provider("deepseek", api_key="sk-...")
        >>> provider.model
        'deepseek-chat'
    """
    name = canonical_provider_name(provider)
    return PROVIDER_CLASSES[name](api_key, model or DEFAULT_MODELS[name], **config)

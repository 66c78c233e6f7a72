"""Configuration for pyask.

Hides where credentials, default models and named profiles come from, and
how the user's provider/model/profile choices are turned into one concrete
backend selection.

Settings are read from the environment (a ``.env`` file is loaded by the
CLI through python-dotenv):

    ASK_DEFAULT_PROVIDER   provider used when nothing else decides
    GEMINI_API_KEY         / GEMINI_MODEL
    ANTHROPIC_API_KEY      / ANTHROPIC_MODEL
    OPENAI_API_KEY         / OPENAI_MODEL
    DEEPSEEK_API_KEY       / DEEPSEEK_MODEL
    MISTRAL_API_KEY        / MISTRAL_MODEL
    DASHSCOPE_API_KEY      / DASHSCOPE_MODEL
    ASK_PROFILES           "fast=gemini/gemini-2.5-flash,smart=claude/claude-3-opus-20240229"
"""

import logging
import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .llm import LLMProvider, create_llm_provider
from .llm.errors import AskError, UnknownProviderError
from .llm.factory import DEFAULT_MODELS, SUPPORTED_PROVIDERS, canonical_provider_name

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "gemini"

# Environment variable prefix of each provider's key and model
PROVIDER_ENV_PREFIXES: dict[str, str] = {
    "gemini": "GEMINI",
    "claude": "ANTHROPIC",
    "chatgpt": "OPENAI",
    "deepseek": "DEEPSEEK",
    "mistral": "MISTRAL",
    "qwen": "DASHSCOPE",
}

# Model name prefix to provider, longest prefixes first
MODEL_PREFIXES: tuple[tuple[str, str], ...] = (
    ("codestral", "mistral"),
    ("ministral", "mistral"),
    ("deepseek", "deepseek"),
    ("mistral", "mistral"),
    ("pixtral", "mistral"),
    ("gemini", "gemini"),
    ("claude", "claude"),
    ("qwen", "qwen"),
    ("gpt", "chatgpt"),
    ("o1", "chatgpt"),
    ("o3", "chatgpt"),
)

PLACEHOLDER_PREFIXES = ("YOUR_", "REPLACE_", "INSERT_", "ADD_YOUR_", "PASTE_")
PLACEHOLDER_VALUES = {"your-api-key-here", "sk-...", "***"}


class ConfigError(AskError):
    """The configuration cannot produce a usable backend."""


class ProfileError(ConfigError):
    """A named profile is missing or malformed."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"profile '{name}': {reason}")


class MissingKeyError(ConfigError):
    """The selected provider has no API key configured."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(
            f"no API key configured for provider '{provider}' (set {key_env_var(provider)})"
        )


class PlaceholderKeyError(ConfigError):
    """The API key still holds a template placeholder."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(
            f"placeholder API key detected for provider '{provider}' "
            f"(set {key_env_var(provider)})"
        )


def key_env_var(provider: str) -> str:
    return f"{PROVIDER_ENV_PREFIXES.get(provider, provider.upper())}_API_KEY"


def is_placeholder_key(key: str) -> bool:
    """Return True for template values such as ``YOUR_API_KEY`` or ``sk-...``."""
    if not key:
        return False
    return key in PLACEHOLDER_VALUES or key.startswith(PLACEHOLDER_PREFIXES)


def parse_model_spec(spec: str) -> tuple[str, str]:
    """Split ``provider/model`` into its parts.

    A spec without a slash is a bare model name and yields an empty
    provider. Only the first slash separates; the rest belongs to the model.

    Examples:
        >>> parse_model_spec("gemini/gemini-2.5-flash")
        ('gemini', 'gemini-2.5-flash')
        >>> parse_model_spec("gpt-4o")
        ('', 'gpt-4o')
    """
    spec = spec.strip()
    if "/" not in spec:
        return "", spec
    provider, model = spec.split("/", 1)
    return provider.strip(), model.strip()


def resolve_provider_from_model(model: str) -> str:
    """Infer a provider from the model name prefix, or "" when unknown."""
    lowered = model.strip().lower()
    for prefix, provider in MODEL_PREFIXES:
        if lowered.startswith(prefix):
            return provider
    return ""


def is_provider_name(value: str) -> bool:
    try:
        canonical_provider_name(value)
    except UnknownProviderError:
        return False
    return True


def parse_profiles(value: str) -> dict[str, str]:
    """Parse ``name=provider/model`` pairs separated by commas.

    Raises:
        ProfileError: If an entry has no ``=`` or an empty name or spec
    """
    profiles: dict[str, str] = {}
    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        name, sep, spec = entry.partition("=")
        name, spec = name.strip(), spec.strip()
        if not sep or not name or not spec:
            raise ProfileError(name or entry, "expected name=provider/model")
        profiles[name] = spec
    return profiles


class ProviderSettings(BaseModel):
    """Credential and preferred model of one provider."""

    model_config = ConfigDict(frozen=True)

    api_key: str = ""
    model: str = ""


class ResolvedProvider(BaseModel):
    """A concrete backend selection ready to be constructed."""

    model_config = ConfigDict(frozen=True)

    provider: str
    model: str
    api_key: str = Field(repr=False)

    @property
    def spec(self) -> str:
        return f"{self.provider}/{self.model}"

    def create(self, **config: Any) -> LLMProvider:
        """Construct the provider facade through the factory."""
        return create_llm_provider(self.provider, api_key=self.api_key, model=self.model, **config)


class AskConfig(BaseModel):
    """Complete pyask configuration."""

    model_config = ConfigDict(frozen=True)

    default_provider: str = DEFAULT_PROVIDER
    providers: dict[str, ProviderSettings] = Field(default_factory=dict)
    profiles: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AskConfig":
        """Build the configuration from environment variables.

        Without ``ASK_DEFAULT_PROVIDER`` the first provider with a key
        configured becomes the default.

        Raises:
            ProfileError: If ``ASK_PROFILES`` is malformed
            UnknownProviderError: If ``ASK_DEFAULT_PROVIDER`` names no backend
        """
        env = os.environ if environ is None else environ
        providers = {}
        for name in SUPPORTED_PROVIDERS:
            prefix = PROVIDER_ENV_PREFIXES[name]
            api_key = env.get(f"{prefix}_API_KEY", "").strip()
            model = env.get(f"{prefix}_MODEL", "").strip()
            if api_key or model:
                providers[name] = ProviderSettings(api_key=api_key, model=model)

        default = env.get("ASK_DEFAULT_PROVIDER", "").strip()
        if default:
            default = canonical_provider_name(default)
        else:
            default = next(
                (name for name, settings in providers.items() if settings.api_key),
                DEFAULT_PROVIDER,
            )

        profiles = parse_profiles(env.get("ASK_PROFILES", ""))
        logger.debug(
            "Loaded config: default=%s providers=%s profiles=%s",
            default, sorted(providers), sorted(profiles),
        )
        return cls(default_provider=default, providers=providers, profiles=profiles)

    def settings_for(self, provider: str) -> ProviderSettings:
        return self.providers.get(provider, ProviderSettings())

    def resolve(
        self,
        provider: str | None = None,
        model: str | None = None,
        profile: str | None = None,
    ) -> ResolvedProvider:
        """Decide which backend and model to use.

        Priority:
        1. Named profile
        2. Explicit provider
        3. Provider part of a ``provider/model`` spec
        4. Provider inferred from the model name prefix
        5. Default provider

        The model falls back to the provider's configured model, then to
        the provider's default model.

        Raises:
            ProfileError: If the profile is unknown or names no provider
            UnknownProviderError: If the provider is not supported
            MissingKeyError: If the provider has no API key
            PlaceholderKeyError: If the API key is a placeholder
        """
        if profile:
            return self._resolve_profile(profile)

        spec_provider, spec_model = parse_model_spec(model or "")
        chosen = (
            (provider or "").strip()
            or spec_provider
            or resolve_provider_from_model(spec_model)
            or self.default_provider
        )
        return self._finish(canonical_provider_name(chosen), spec_model)

    def resolve_switch(self, spec: str, current_provider: str) -> ResolvedProvider:
        """Resolve an in-session ``/model`` argument.

        A bare provider name selects that provider's configured or default
        model. A bare model name that matches no known prefix stays on the
        current provider.
        """
        spec_provider, spec_model = parse_model_spec(spec)
        if not spec_provider and is_provider_name(spec_model):
            return self._finish(canonical_provider_name(spec_model), "")
        chosen = spec_provider or resolve_provider_from_model(spec_model) or current_provider
        return self._finish(canonical_provider_name(chosen), spec_model)

    def _resolve_profile(self, profile: str) -> ResolvedProvider:
        if not self.profiles:
            raise ProfileError(profile, "no profiles defined (set ASK_PROFILES)")
        spec = self.profiles.get(profile)
        if spec is None:
            raise ProfileError(profile, "profile not found")
        spec_provider, spec_model = parse_model_spec(spec)
        chosen = spec_provider or resolve_provider_from_model(spec_model)
        if not chosen:
            raise ProfileError(profile, "cannot determine provider from profile")
        return self._finish(canonical_provider_name(chosen), spec_model)

    def _finish(self, provider: str, model: str) -> ResolvedProvider:
        settings = self.settings_for(provider)
        if not settings.api_key:
            raise MissingKeyError(provider)
        if is_placeholder_key(settings.api_key):
            raise PlaceholderKeyError(provider)
        chosen_model = model or settings.model or DEFAULT_MODELS[provider]
        logger.debug("Resolved %s/%s", provider, chosen_model)
        return ResolvedProvider(provider=provider, model=chosen_model, api_key=settings.api_key)

"""Provider configuration: mutable credential store and immutable snapshots.

The store is the only owner of API keys that can change at runtime. The
generation client never holds on to the store's internals; it asks for a
``ProviderSnapshot`` at call time and works from that frozen copy.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Any

from dotenv import set_key
from pydantic import BaseModel, ConfigDict, Field

from ..errors import UnknownProvider
from ...observability.logger import get_logger

logger = get_logger(__name__)


DEFAULT_PROVIDERS: dict[str, dict[str, Any]] = {
    "openrouter": {
        "base_url": "https://openrouter.ai/api/v1",
        "model": "mistralai/mixtral-8x7b-instruct",
        "api_key_env": "OPENROUTER_API_KEY",
        "headers": {
            "HTTP-Referer": "http://localhost:3001",
            "X-Title": "LaTeX CV Optimizer",
        },
    },
    "groq": {
        "base_url": "https://api.groq.com/openai/v1",
        "model": "llama3-70b-8192",
        "api_key_env": "GROQ_API_KEY",
        "headers": {},
    },
}


class ProviderConfig(BaseModel):
    """Frozen view of one provider."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Provider name (e.g. 'openrouter')")
    base_url: str = Field(..., description="OpenAI-compatible API base URL")
    model: str = Field(..., description="Model identifier")
    api_key: str | None = Field(None, description="Bearer credential", repr=False)
    headers: dict[str, str] = Field(default_factory=dict, description="Extra request headers")

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


class ProviderSnapshot(BaseModel):
    """Immutable, ordered set of providers handed to the generation client."""

    model_config = ConfigDict(frozen=True)

    providers: tuple[ProviderConfig, ...] = Field(default_factory=tuple)

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.providers]

    def get(self, name: str) -> ProviderConfig:
        for provider in self.providers:
            if provider.name == name:
                return provider
        raise UnknownProvider(name)


class GenerationSettings(BaseModel):
    """Request-shaping settings shared by every generation call."""

    model_config = ConfigDict(frozen=True)

    preferred_provider: str = "openrouter"
    max_attempts: int = Field(3, ge=1)
    backoff_base: float = Field(1.0, ge=0.0)
    timeout: float = Field(30.0, gt=0.0)
    temperature: float = Field(0.1, ge=0.0, le=2.0)
    max_tokens: int = Field(4000, gt=0)
    system_instruction: str = (
        "You are an expert AI workflow specializing in LaTeX CV optimization and "
        "job-specific tailoring. You must be deterministic, factual, and explainable."
    )

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "GenerationSettings":
        gen_cfg = dict(config.get("generation", {}))
        gen_cfg.pop("provider_order", None)
        return cls(**gen_cfg)


class ProviderConfigStore:
    """Owns provider definitions and their (mutable) credentials."""

    def __init__(
        self,
        providers: dict[str, dict[str, Any]] | None = None,
        order: list[str] | None = None,
    ):
        definitions = providers or DEFAULT_PROVIDERS
        self._order = list(order or definitions.keys())
        self._definitions: dict[str, dict[str, Any]] = {}
        self._api_keys: dict[str, str | None] = {}
        self._lock = threading.Lock()

        for name in self._order:
            if name not in definitions:
                raise UnknownProvider(name)
            definition = dict(definitions[name])
            self._definitions[name] = definition
            env_var = definition.get("api_key_env")
            self._api_keys[name] = definition.get("api_key") or (
                os.getenv(env_var) if env_var else None
            )

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "ProviderConfigStore":
        """Build the store from the loaded configuration.

        Args:
            config: Merged configuration dictionary

        Returns:
            ProviderConfigStore with keys resolved from the environment
        """
        providers = config.get("providers") or DEFAULT_PROVIDERS
        order = config.get("generation", {}).get("provider_order")
        return cls(providers=providers, order=order)

    @property
    def provider_names(self) -> list[str]:
        return list(self._order)

    def configure(self, provider: str, api_key: str) -> ProviderConfig:
        """Set the API key of a provider for the rest of the process.

        Args:
            provider: Provider name
            api_key: New bearer credential

        Returns:
            The provider's updated frozen config

        Raises:
            UnknownProvider: If the provider is not defined
            ValueError: If the key is empty
        """
        if provider not in self._definitions:
            raise UnknownProvider(provider)
        if not api_key or not api_key.strip():
            raise ValueError("Provider and API key are required")

        with self._lock:
            self._api_keys[provider] = api_key.strip()

        logger.info("provider_configured", provider=provider)
        return self.snapshot().get(provider)

    def snapshot(self) -> ProviderSnapshot:
        """Return an immutable copy of the current provider configuration."""
        with self._lock:
            providers = tuple(
                ProviderConfig(
                    name=name,
                    base_url=self._definitions[name]["base_url"],
                    model=self._definitions[name]["model"],
                    api_key=self._api_keys.get(name),
                    headers=self._definitions[name].get("headers") or {},
                )
                for name in self._order
            )
        return ProviderSnapshot(providers=providers)

    def persist(self, provider: str, env_file: str | Path = ".env") -> Path:
        """Write a provider's current key to a dotenv file read at startup.

        The key is stored under the provider's ``api_key_env`` variable, which
        the config loader picks up through python-dotenv on the next run.

        Raises:
            UnknownProvider: If the provider is not defined
            ValueError: If the provider has no key or no ``api_key_env``
        """
        if provider not in self._definitions:
            raise UnknownProvider(provider)
        env_var = self._definitions[provider].get("api_key_env")
        with self._lock:
            api_key = self._api_keys.get(provider)
        if not env_var:
            raise ValueError(f"Provider '{provider}' has no api_key_env to persist to")
        if not api_key:
            raise ValueError(f"Provider '{provider}' has no API key to persist")

        path = Path(env_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        # set_key refuses to create the file itself
        path.touch(exist_ok=True)
        set_key(str(path), env_var, api_key)

        logger.info("provider_persisted", provider=provider, env_var=env_var, env_file=str(path))
        return path

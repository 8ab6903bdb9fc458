"""Generation client with provider failover and linear-backoff retry."""

import asyncio
from typing import Any, Awaitable, Callable, Protocol

from openai import AsyncOpenAI
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from ..core.config.providers import GenerationSettings, ProviderConfig, ProviderConfigStore
from ..core.errors import GenerationUnavailable, MissingCredential, UnknownProvider
from ..observability.logger import get_logger

logger = get_logger(__name__)


class ChatBackend(Protocol):
    """One chat completion against one provider."""

    async def chat_complete(
        self, system_instruction: str, user_prompt: str, provider: ProviderConfig
    ) -> str:
        ...


class OpenAIChatBackend:
    """Chat backend for OpenAI-compatible endpoints (OpenRouter, Groq)."""

    def __init__(self, settings: GenerationSettings):
        """Initialize backend.

        Args:
            settings: Request settings (timeout, temperature, max_tokens)
        """
        self.settings = settings
        # One SDK client per (provider, credential); rebuilt when the key changes
        self._clients: dict[tuple[str, str], AsyncOpenAI] = {}

    def _client_for(self, provider: ProviderConfig) -> AsyncOpenAI:
        key = (provider.name, provider.api_key or "")
        client = self._clients.get(key)
        if client is None:
            client = AsyncOpenAI(
                api_key=provider.api_key,
                base_url=provider.base_url,
                default_headers=provider.headers or None,
                timeout=self.settings.timeout,
                # Retry and failover belong to GenerationClient
                max_retries=0,
            )
            self._clients[key] = client
            logger.info("chat_backend_client_initialized", provider=provider.name, model=provider.model)
        return client

    async def chat_complete(
        self, system_instruction: str, user_prompt: str, provider: ProviderConfig
    ) -> str:
        client = self._client_for(provider)
        completion = await client.chat.completions.create(
            model=provider.model,
            messages=[
                {"role": "system", "content": system_instruction},
                {"role": "user", "content": user_prompt},
            ],
            temperature=self.settings.temperature,
            max_tokens=self.settings.max_tokens,
        )

        content = completion.choices[0].message.content if completion.choices else None
        if not content or not content.strip():
            raise ValueError(f"No text content returned from provider '{provider.name}'")

        logger.debug(
            "chat_completion_received",
            provider=provider.name,
            tokens_total=getattr(completion.usage, "total_tokens", 0),
        )
        return content


class GenerationClient:
    """One logical generation request with failover across providers.

    The attempt sequence starts at the preferred provider and moves round-robin
    through the configured order. A provider without a credential aborts the
    call immediately. Every other failure is logged and retried after
    ``backoff_base * attempt_number`` seconds until ``max_attempts`` is spent.
    """

    def __init__(
        self,
        store: ProviderConfigStore,
        settings: GenerationSettings | None = None,
        backend: ChatBackend | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.store = store
        self.settings = settings or GenerationSettings()
        self.backend = backend or OpenAIChatBackend(self.settings)
        self._sleep = sleep

    async def invoke(
        self,
        prompt: str,
        preferred_provider: str | None = None,
        max_attempts: int | None = None,
    ) -> str:
        """Send a prompt and return the generated text.

        Args:
            prompt: User prompt
            preferred_provider: Provider for the first attempt (defaults to settings)
            max_attempts: Attempt budget across all providers (defaults to settings)

        Returns:
            Non-empty generated text

        Raises:
            MissingCredential: If the selected provider has no API key
            GenerationUnavailable: If every attempt failed
            UnknownProvider: If the preferred provider is not configured
        """
        snapshot = self.store.snapshot()
        providers = snapshot.providers
        if not providers:
            raise GenerationUnavailable(0, last_error=RuntimeError("No providers configured"))

        preferred = preferred_provider or self.settings.preferred_provider
        if preferred not in snapshot.names:
            raise UnknownProvider(preferred)
        start = snapshot.names.index(preferred)
        attempts = max_attempts or self.settings.max_attempts
        tried: list[str] = []

        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_incrementing(start=self.settings.backoff_base, increment=self.settings.backoff_base),
            retry=retry_if_exception_type(Exception) & retry_if_not_exception_type(MissingCredential),
            sleep=self._sleep,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    number = attempt.retry_state.attempt_number
                    provider = providers[(start + number - 1) % len(providers)]
                    tried.append(provider.name)
                    return await self._attempt(prompt, provider, number, attempts)
        except RetryError as e:
            last_error = e.last_attempt.exception()
            logger.error(
                "generation_unavailable",
                attempts=attempts,
                providers=tried,
                error=str(last_error),
            )
            raise GenerationUnavailable(attempts, providers=tried, last_error=last_error) from last_error

        # AsyncRetrying either returns from the body or raises
        raise GenerationUnavailable(attempts, providers=tried)

    async def _attempt(self, prompt: str, provider: ProviderConfig, number: int, attempts: int) -> str:
        if not provider.has_credential:
            logger.error("generation_missing_credential", provider=provider.name, attempt=number)
            raise MissingCredential(provider.name)

        logger.info("generation_attempt", attempt=number, max_attempts=attempts, provider=provider.name)
        try:
            text = await self.backend.chat_complete(self.settings.system_instruction, prompt, provider)
            if not text or not text.strip():
                raise ValueError(f"No text content returned from provider '{provider.name}'")
        except Exception as e:
            logger.warning(
                "generation_attempt_failed",
                attempt=number,
                max_attempts=attempts,
                provider=provider.name,
                error=str(e),
            )
            raise

        logger.info("generation_succeeded", attempt=number, provider=provider.name, length=len(text))
        return text


def build_generation_client(
    config: dict[str, Any],
    store: ProviderConfigStore | None = None,
    backend: ChatBackend | None = None,
) -> GenerationClient:
    """Create a generation client from the loaded configuration.

    Args:
        config: Merged configuration dictionary
        store: Existing provider store (a new one is built from config otherwise)
        backend: Chat backend override

    Returns:
        GenerationClient instance
    """
    settings = GenerationSettings.from_config(config)
    return GenerationClient(
        store=store or ProviderConfigStore.from_config(config),
        settings=settings,
        backend=backend,
    )

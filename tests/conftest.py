"""Shared fixtures: a scripted chat backend and a generation client that never sleeps."""

from pathlib import Path

import pytest

from cvtailor.core.config.personal_notes import clear_personal_notes_cache
from cvtailor.core.config.providers import GenerationSettings, ProviderConfigStore
from cvtailor.integrations.llm_client import GenerationClient

TEMPLATE_PATH = Path(__file__).resolve().parent.parent / "config" / "templates" / "sample_cv.tex"

PROVIDERS = {
    "alpha": {"base_url": "https://alpha.example/v1", "model": "alpha-1", "api_key": "key-a"},
    "beta": {"base_url": "https://beta.example/v1", "model": "beta-1", "api_key": "key-b"},
    "gamma": {"base_url": "https://gamma.example/v1", "model": "gamma-1", "api_key": "key-c"},
}


class FakeBackend:
    """Chat backend returning scripted replies.

    ``replies`` is either a list consumed in order (an Exception item is
    raised instead of returned) or a callable ``prompt -> reply``.
    """

    def __init__(self, replies=None):
        self.replies = replies if replies is not None else []
        self.calls: list[tuple[str, str]] = []

    async def chat_complete(self, system_instruction, user_prompt, provider):
        self.calls.append((provider.name, user_prompt))
        if callable(self.replies):
            reply = self.replies(user_prompt)
        elif self.replies:
            reply = self.replies.pop(0)
        else:
            reply = RuntimeError("no scripted reply left")
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def providers_called(self) -> list[str]:
        return [name for name, _ in self.calls]


async def no_sleep(_seconds):
    return None


def make_client(backend, providers=None, preferred="alpha", max_attempts=3) -> GenerationClient:
    providers = providers or PROVIDERS
    store = ProviderConfigStore(providers=providers, order=list(providers))
    settings = GenerationSettings(preferred_provider=preferred, max_attempts=max_attempts, backoff_base=0.5)
    return GenerationClient(store, settings=settings, backend=backend, sleep=no_sleep)


@pytest.fixture
def template_text() -> str:
    return TEMPLATE_PATH.read_text(encoding="utf-8")


@pytest.fixture
def job_description() -> str:
    return (
        "Senior Backend Engineer at a logistics startup. "
        "We are looking for strong Python and FastAPI experience, Kubernetes, "
        "PostgreSQL tuning and event-driven design with Kafka."
    )


@pytest.fixture(autouse=True)
def _fresh_notes_cache():
    clear_personal_notes_cache()
    yield
    clear_personal_notes_cache()


@pytest.fixture
def backend_factory():
    return FakeBackend


@pytest.fixture
def client_factory():
    return make_client

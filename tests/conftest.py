import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from app.main import app
from app.core.database import get_store
from app.core.llm import get_text_generator


# Prompt markers used to tell the pipeline's generation calls apart
DOMAIN = "domain"
INTENT = "intent"
TRANSLATE = "translate"
SUMMARY = "summary"
HEALTH = "health"

_MARKERS = {
    DOMAIN: "in scope for a healthcare clinic assistant",
    INTENT: "Your task is to classify the following question",
    TRANSLATE: "Convert this English question",
    SUMMARY: "Summarize these query results",
    HEALTH: "helpful and knowledgeable medical assistant",
}


class FakeTextGenerator:
    """Answers each kind of prompt with a canned reply, or raises it if it's an exception."""

    def __init__(self, **replies):
        self.replies = {
            DOMAIN: "true",
            INTENT: "health",
            TRANSLATE: "SELECT id, fullName FROM doctors",
            SUMMARY: "There are 0 results.",
            HEALTH: "Rest and fluids usually help. Please see a healthcare professional.",
        }
        self.replies.update(replies)
        self.calls = []

    def kind_of(self, prompt: str) -> str:
        for kind, marker in _MARKERS.items():
            if marker in prompt:
                return kind
        raise AssertionError(f"Unrecognized prompt: {prompt[:80]!r}")

    async def generate(self, prompt: str, *, temperature: float = 0.0, max_tokens: int = 256) -> str:
        kind = self.kind_of(prompt)
        self.calls.append(
            {"kind": kind, "prompt": prompt, "temperature": temperature, "max_tokens": max_tokens}
        )
        reply = self.replies[kind]
        if isinstance(reply, Exception):
            raise reply
        return reply

    def kinds(self):
        return [call["kind"] for call in self.calls]


class FakeStore:
    """Returns canned rows, or raises the configured error."""

    def __init__(self, rows=None, error: Exception = None):
        self.rows = rows or []
        self.error = error
        self.queries = []

    async def fetch_all(self, sql: str):
        self.queries.append(sql)
        if self.error is not None:
            raise self.error
        return list(self.rows)


def doctor_rows(count: int):
    return [
        {"id": i, "fullName": f"Doctor {i}", "specialty": "Cardiology", "rating": 4.5}
        for i in range(1, count + 1)
    ]


@pytest.fixture
def generator():
    return FakeTextGenerator()


@pytest.fixture
def fake_store():
    return FakeStore()


# Client wired to the fakes instead of Azure OpenAI and SQL Server
@pytest_asyncio.fixture(scope="function")
async def client(generator: FakeTextGenerator, fake_store: FakeStore):
    app.dependency_overrides[get_text_generator] = lambda: generator
    app.dependency_overrides[get_store] = lambda: fake_store

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()

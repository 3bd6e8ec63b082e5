import logging
from typing import Optional, Protocol

from openai import AsyncAzureOpenAI

from app.core.config import settings
from app.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    """Prompt in, completion text out."""

    async def generate(
        self, prompt: str, *, temperature: float = 0.0, max_tokens: int = 256
    ) -> str: ...


class AzureOpenAITextGenerator:
    """Single-turn chat completion against an Azure OpenAI deployment."""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        api_key: Optional[str] = None,
        api_version: Optional[str] = None,
        deployment: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.endpoint = endpoint or settings.AZURE_OPENAI_ENDPOINT
        self.api_key = api_key or settings.AZURE_OPENAI_KEY
        self.api_version = api_version or settings.AZURE_OPENAI_VERSION
        self.deployment = deployment or settings.AZURE_OPENAI_DEPLOYMENT

        missing = [
            name
            for name, value in (
                ("AZURE_OPENAI_ENDPOINT", self.endpoint),
                ("AZURE_OPENAI_KEY", self.api_key),
                ("AZURE_OPENAI_VERSION", self.api_version),
                ("AZURE_OPENAI_DEPLOYMENT", self.deployment),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Language model is not configured (missing {', '.join(missing)})"
            )

        # No SDK-level retries: a failed call resolves to the stage's fallback
        self.client = AsyncAzureOpenAI(
            azure_endpoint=self.endpoint,
            api_key=self.api_key,
            api_version=self.api_version,
            azure_deployment=self.deployment,
            timeout=timeout or settings.LLM_TIMEOUT_SECONDS,
            max_retries=0,
        )

    async def generate(
        self, prompt: str, *, temperature: float = 0.0, max_tokens: int = 256
    ) -> str:
        logger.debug("Prompt sent to %s:\n%s", self.deployment, prompt)
        response = await self.client.chat.completions.create(
            model=self.deployment,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        content = response.choices[0].message.content or ""
        return content.strip()


_generator: Optional[AzureOpenAITextGenerator] = None


def get_text_generator() -> TextGenerator:
    global _generator
    if _generator is None:
        _generator = AzureOpenAITextGenerator()
    return _generator

import logging

from openai import AsyncOpenAI, OpenAIError

from walkdraw.core.config import settings
from walkdraw.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class LLMClient:
    """Text completion client for any OpenAI-compatible endpoint (Gemini by default)."""

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ):
        self.model_name = model_name or settings.MODEL_DEFAULT

        # Use LLM_API_KEY or fall back to GEMINI_API_KEY
        resolved_api_key = api_key or settings.LLM_API_KEY or settings.GEMINI_API_KEY
        resolved_base_url = base_url or settings.LLM_BASE_URL
        if not resolved_api_key:
            # The provider rejects the request; the relay reports it as an upstream failure
            logger.warning("No LLM API key configured; completions will fail")
            resolved_api_key = ""

        # Retries are the caller's decision, never the client's
        self.client = AsyncOpenAI(
            base_url=resolved_base_url,
            api_key=resolved_api_key,
            timeout=timeout or settings.LLM_TIMEOUT_SECONDS,
            max_retries=0,
        )

    async def complete(self, prompt: str) -> str:
        """
        Send a single user prompt and return the completion text exactly as produced.
        Raises UpstreamError when the provider fails, times out, or returns no output.
        """
        logger.info("Issuing completion request to model %s...", self.model_name)
        try:
            response = await self.client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": prompt}],
            )
        except OpenAIError as e:
            logger.error("Error calling LLM provider %s: %s", self.model_name, e)
            raise UpstreamError(f"Provider {self.model_name} request failed") from e

        if not getattr(response, "choices", None):
            logger.error("Received 0 choices from %s: %s", self.model_name, response)
            raise UpstreamError(f"Provider {self.model_name} returned no output")

        text_response = response.choices[0].message.content
        if text_response is None:
            raise UpstreamError(f"Provider {self.model_name} returned empty content")
        logger.info("Successfully received completion from %s.", self.model_name)
        return text_response

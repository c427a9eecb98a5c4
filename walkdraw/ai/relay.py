from typing import Any

from walkdraw.ai.llm_client import LLMClient
from walkdraw.core.config import settings
from walkdraw.exceptions import InvalidInput


class PromptRelay:
    """Forwards a prompt to the generative text service and returns its answer verbatim."""

    def __init__(self, model_name: str | None = None, llm: LLMClient | None = None):
        self.llm = llm or LLMClient(model_name=model_name or settings.MODEL_DEFAULT)

    async def relay(self, prompt: Any) -> str:
        if not isinstance(prompt, str) or not prompt:
            raise InvalidInput("Request must include a 'query' parameter of type string")
        return await self.llm.complete(prompt)

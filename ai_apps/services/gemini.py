import json
import logging
import re
from typing import Any, Optional

from langchain_core.language_models import BaseChatModel

from ai_apps.errors import ProviderError

logger = logging.getLogger(__name__)

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)


def parse_json_reply(text: str) -> Any:
    """Parse a model reply that should be JSON, tolerating a markdown code fence"""
    cleaned = text.strip()
    fence_match = _JSON_FENCE_RE.search(cleaned)
    if fence_match:
        cleaned = fence_match.group(1).strip()

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ProviderError(f"Gemini returned malformed JSON: {e}") from e


class GeminiJSONClient:
    """
    Secondary provider: a general-purpose generative model prompted to answer
    with a small JSON object.
    """

    def __init__(self, llm: Optional[BaseChatModel]):
        self.llm = llm

    @property
    def configured(self) -> bool:
        return self.llm is not None

    async def generate_json(self, prompt: str) -> Any:
        if self.llm is None:
            raise ProviderError("Gemini API key not configured")

        response = await self.llm.ainvoke(prompt)
        content = response.content
        if not isinstance(content, str):
            # Multi-part replies come back as a list of text blocks
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part) for part in content
            )
        return parse_json_reply(content)

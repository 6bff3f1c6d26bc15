import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from ai_apps.errors import CredentialMissing, InvalidInput
from .fallback import Candidate, FallbackChain, round_half_up
from .gemini import GeminiJSONClient
from .huggingface import HuggingFaceClient

logger = logging.getLogger(__name__)

HUGGINGFACE_MODELS = {
    "bart-cnn": "facebook/bart-large-cnn",  # Best for news articles
    "t5-small": "t5-small",  # Fast, general purpose
    "pegasus": "google/pegasus-large",  # Good for abstractive summaries
}

FALLBACK_ORDER = ["bart-cnn", "t5-small"]

MIN_TEXT_LENGTH = 50
MAX_TEXT_LENGTH = 10000


@dataclass
class SummarizationResult:
    original_text: str
    summary: str
    word_count: int
    compression_ratio: int


def count_words(text: str) -> int:
    return len(text.split())


def compression_ratio(original_text: str, summary: str) -> int:
    original_words = count_words(original_text)
    if original_words == 0:
        return 0
    return round_half_up((1 - count_words(summary) / original_words) * 100)


def parse_huggingface_summary(payload: Any) -> str:
    if isinstance(payload, list) and payload and isinstance(payload[0], dict):
        if payload[0].get("summary_text"):
            return payload[0]["summary_text"]
        if payload[0].get("generated_text"):
            return payload[0]["generated_text"]
    if isinstance(payload, str) and payload.strip():
        return payload
    raise ValueError("Unexpected response format from Hugging Face")


def validate_text(text: Any) -> str:
    if not text or not isinstance(text, str):
        raise InvalidInput("Text is required and must be a string")
    if len(text) < MIN_TEXT_LENGTH:
        raise InvalidInput(f"Text must be at least {MIN_TEXT_LENGTH} characters long")
    if len(text) > MAX_TEXT_LENGTH:
        raise InvalidInput("Text is too long. Maximum 10,000 characters allowed.")
    return text


def model_order(preferred: Optional[str]) -> List[str]:
    order = []
    if preferred in HUGGINGFACE_MODELS:
        order.append(preferred)
    for key in FALLBACK_ORDER:
        if key not in order:
            order.append(key)
    return order


class Summarizer:
    """Summarizes text with Hugging Face models, falling back to Gemini."""

    def __init__(self, huggingface: HuggingFaceClient, gemini: GeminiJSONClient):
        self.huggingface = huggingface
        self.gemini = gemini

    async def summarize(
        self, text: Any, model: Optional[str] = "bart-cnn", summary_type: str = "concise"
    ) -> SummarizationResult:
        text = validate_text(text)

        if not self.huggingface.configured and not self.gemini.configured:
            raise CredentialMissing(
                "No summarization provider configured. Set HUGGINGFACE_API_TOKEN or GOOGLE_GEMINI_API_KEY."
            )

        candidates = [
            Candidate(name=f"huggingface:{key}", invoke=self._huggingface_invoker(text, key))
            for key in model_order(model)
        ]
        candidates.append(Candidate(name="gemini", invoke=lambda: self._gemini_summary(text, summary_type)))

        chain = FallbackChain(
            task="summarization",
            candidates=candidates,
            unavailable_message=(
                "All summarization services are currently unavailable. "
                "Please check your API keys and try again later."
            ),
        )
        summary = (await chain.run()).strip()

        return SummarizationResult(
            original_text=text,
            summary=summary,
            word_count=count_words(summary),
            compression_ratio=compression_ratio(text, summary),
        )

    def _huggingface_invoker(self, text: str, key: str):
        async def invoke() -> str:
            payload = await self.huggingface.infer(
                HUGGINGFACE_MODELS[key],
                {
                    "inputs": text,
                    "parameters": {"max_length": 150, "min_length": 30, "do_sample": False},
                },
            )
            return parse_huggingface_summary(payload)

        return invoke

    async def _gemini_summary(self, text: str, summary_type: str) -> str:
        prompt = f"""Please provide a {summary_type} summary of the following text. The summary should be concise, informative, and capture the main points.
Respond only with JSON in the format: {{"summary": "..."}}

Text to summarize:
{text}"""
        reply = await self.gemini.generate_json(prompt)
        summary = reply.get("summary") if isinstance(reply, dict) else None
        if not isinstance(summary, str) or not summary.strip():
            raise ValueError("Gemini reply is missing 'summary'")
        return summary

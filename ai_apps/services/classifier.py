import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from ai_apps.errors import CredentialMissing, InvalidInput
from .fallback import Candidate, FallbackChain, round_half_up
from .gemini import GeminiJSONClient
from .huggingface import HuggingFaceClient

logger = logging.getLogger(__name__)

HUGGINGFACE_CLASSIFICATION_MODELS = {
    "sentiment-analysis": "cardiffnlp/twitter-roberta-base-sentiment-latest",
    "topic-classification": "facebook/bart-large-mnli",
    "emotion-detection": "joeddav/distilbert-base-uncased-go-emotions-student",
}

DEFAULT_TOPIC_LABELS = [
    "technology",
    "business",
    "politics",
    "sports",
    "entertainment",
    "science",
    "health",
]


@dataclass
class CategoryScore:
    name: str
    score: int


@dataclass
class ClassificationResult:
    label: str
    confidence: int
    categories: List[CategoryScore] = field(default_factory=list)


def _label_score_pairs(payload: Any) -> List[Tuple[str, float]]:
    if isinstance(payload, dict):
        if "labels" in payload and "scores" in payload:
            labels, scores = payload["labels"], payload["scores"]
            if not isinstance(labels, list) or not isinstance(scores, list) or len(labels) != len(scores):
                raise ValueError("Mismatched labels/scores in classification payload")
            return [(str(label), float(score)) for label, score in zip(labels, scores)]
        if "label" in payload and "score" in payload:
            return [(str(payload["label"]), float(payload["score"]))]
        raise ValueError("Unexpected classification payload object")

    if isinstance(payload, list):
        # Text-classification pipelines nest one list per input
        items = payload[0] if payload and isinstance(payload[0], list) else payload
        pairs = []
        for item in items:
            if not isinstance(item, dict) or "label" not in item or "score" not in item:
                raise ValueError("Unexpected item in classification payload")
            pairs.append((str(item["label"]), float(item["score"])))
        return pairs

    raise ValueError(f"Unexpected classification payload type: {type(payload).__name__}")


def normalize_classification(payload: Any) -> ClassificationResult:
    """Map any supported provider payload into a ClassificationResult"""
    pairs = _label_score_pairs(payload)
    if not pairs:
        raise ValueError("Classification payload contained no labels")

    # Highest score, not first entry: Gemini replies are not guaranteed to be sorted
    top_label, top_score = max(pairs, key=lambda pair: pair[1])
    return ClassificationResult(
        label=top_label,
        confidence=round_half_up(top_score * 100),
        categories=[CategoryScore(name=label, score=round_half_up(score * 100)) for label, score in pairs],
    )


class Classifier:
    """Classifies text with a Hugging Face model, falling back to Gemini."""

    def __init__(self, huggingface: HuggingFaceClient, gemini: GeminiJSONClient):
        self.huggingface = huggingface
        self.gemini = gemini

    async def classify(
        self, text: Any, model: Optional[str], custom_labels: Optional[Sequence[str]] = None
    ) -> ClassificationResult:
        if not text or not isinstance(text, str) or not model:
            raise InvalidInput("Invalid request body")
        if model not in HUGGINGFACE_CLASSIFICATION_MODELS:
            raise InvalidInput(
                f"Unknown classification model '{model}'. "
                f"Choose one of: {', '.join(HUGGINGFACE_CLASSIFICATION_MODELS)}"
            )

        if not self.huggingface.configured and not self.gemini.configured:
            raise CredentialMissing(
                "No classification provider configured. Set HUGGINGFACE_API_TOKEN or GOOGLE_GEMINI_API_KEY."
            )

        labels = None
        if model == "topic-classification":
            labels = [label for label in (custom_labels or []) if label and label.strip()] or DEFAULT_TOPIC_LABELS

        chain = FallbackChain(
            task="classification",
            candidates=[
                Candidate(name=f"huggingface:{model}", invoke=lambda: self._huggingface_classify(text, model, labels)),
                Candidate(name="gemini", invoke=lambda: self._gemini_classify(text, model, labels)),
            ],
            unavailable_message="All classification services are currently unavailable.",
        )
        return await chain.run()

    async def _huggingface_classify(
        self, text: str, model: str, labels: Optional[List[str]]
    ) -> ClassificationResult:
        payload = {"inputs": text}
        if labels:
            payload["parameters"] = {"candidate_labels": labels}
        raw = await self.huggingface.infer(HUGGINGFACE_CLASSIFICATION_MODELS[model], payload)
        return normalize_classification(raw)

    async def _gemini_classify(
        self, text: str, model: str, labels: Optional[List[str]]
    ) -> ClassificationResult:
        prompt = f'Analyze the following text: "{text}".\n\n'
        if model == "sentiment-analysis":
            prompt += (
                "Classify the sentiment as positive, negative, or neutral. "
                'Provide the result in JSON format: {"label": "sentiment", "score": 0.99}'
            )
        elif model == "topic-classification":
            prompt += (
                f"Classify the text into one of these categories: {', '.join(labels or [])}. "
                'Provide the result in JSON format: {"labels": ["..."], "scores": [...]}'
            )
        else:
            prompt += 'Detect the primary emotion. Provide the result in JSON format: {"label": "emotion", "score": 0.99}'

        return normalize_classification(await self.gemini.generate_json(prompt))

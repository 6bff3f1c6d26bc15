import asyncio
from typing import Any, List

from langchain_core.embeddings import Embeddings
from langchain_core.language_models import FakeListChatModel

VOCABULARY = ["python", "invoice", "weather", "garden"]


class FakeEmbeddings(Embeddings):
    """Counts a few keywords so similarity is predictable."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []

    def _vector(self, text: str) -> List[float]:
        normalized = text.lower()
        return [float(normalized.count(word)) for word in VOCABULARY]

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        return [self._vector(text) for text in texts]

    def embed_query(self, text: str) -> List[float]:
        self.calls.append([text])
        return self._vector(text)


class FailingEmbeddings(Embeddings):
    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        raise RuntimeError("embedding gateway down")

    def embed_query(self, text: str) -> List[float]:
        raise RuntimeError("embedding gateway down")


class RecordingChatModel(FakeListChatModel):
    """FakeListChatModel that remembers the prompts it was called with."""

    received: List[Any] = []

    def _call(self, messages, stop=None, run_manager=None, **kwargs):
        self.received.append(messages)
        return super()._call(messages, stop=stop, run_manager=run_manager, **kwargs)


class ExplodingChatModel(FakeListChatModel):
    responses: List[str] = ["unused"]

    def _call(self, messages, stop=None, run_manager=None, **kwargs):
        raise RuntimeError("chat provider down")

    async def _astream(self, messages, stop=None, run_manager=None, **kwargs):
        raise RuntimeError("chat provider down")
        yield  # pragma: no cover


class FakeHuggingFace:
    """Stands in for HuggingFaceClient; ``responses`` maps model id to payload or exception."""

    def __init__(self, responses: dict, configured: bool = True) -> None:
        self.responses = responses
        self.configured = configured
        self.calls: List[tuple] = []

    async def infer(self, model_id: str, payload: dict) -> Any:
        self.calls.append((model_id, payload))
        response = self.responses.get(model_id, RuntimeError(f"{model_id} unavailable"))
        if isinstance(response, Exception):
            raise response
        return response


class StallingChatModel(FakeListChatModel):
    """Streams its responses normally but never finishes a non-streaming call."""

    async def _agenerate(self, messages, stop=None, run_manager=None, **kwargs):
        await asyncio.sleep(3600)

import logging
import math
from dataclasses import dataclass
from typing import List, Protocol, Sequence, Tuple

from langchain_text_splitters import RecursiveCharacterTextSplitter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentChunk:
    source_filename: str
    text: str
    embedding: Tuple[float, ...]


@dataclass(frozen=True)
class ScoredChunk:
    chunk: DocumentChunk
    score: float


class TextChunker:
    """
    Splits extracted document text into overlapping windows, preferring
    paragraph, line and word boundaries.
    """

    def __init__(self, chunk_size: int = 1000, chunk_overlap: int = 200):
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.text_splitter = RecursiveCharacterTextSplitter(
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
            length_function=len,
        )

    def chunk_text(self, text: str) -> List[str]:
        chunks = self.text_splitter.split_text(text)
        logger.info(f"✅ Created {len(chunks)} chunks (size={self.chunk_size}, overlap={self.chunk_overlap})")
        return chunks


def _cosine(a: Sequence[float], b: Sequence[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


class DocumentStore(Protocol):
    @property
    def document_count(self) -> int: ...

    @property
    def chunk_count(self) -> int: ...

    @property
    def is_empty(self) -> bool: ...

    def append(self, chunks: Sequence[DocumentChunk]) -> int: ...

    def query_top_k(self, vector: Sequence[float], k: int = 4) -> List[ScoredChunk]: ...

    def clear(self) -> None: ...


class InMemoryDocumentStore:
    """
    Process-local chunk collection with an exact linear similarity scan.

    ``append`` receives every chunk of one source file, so ``document_count``
    tracks files rather than chunks. Nothing here survives a restart.
    """

    def __init__(self):
        self._chunks: List[DocumentChunk] = []
        self._document_count = 0

    @property
    def document_count(self) -> int:
        return self._document_count

    @property
    def chunk_count(self) -> int:
        return len(self._chunks)

    @property
    def is_empty(self) -> bool:
        return not self._chunks

    def append(self, chunks: Sequence[DocumentChunk]) -> int:
        self._chunks.extend(chunks)
        self._document_count += 1
        return self._document_count

    def query_top_k(self, vector: Sequence[float], k: int = 4) -> List[ScoredChunk]:
        scored = [
            (index, _cosine(vector, chunk.embedding), chunk)
            for index, chunk in enumerate(list(self._chunks))
        ]
        # Highest score first; equal scores keep insertion order
        scored.sort(key=lambda item: (-item[1], item[0]))
        return [ScoredChunk(chunk=chunk, score=score) for _, score, chunk in scored[: max(0, k)]]

    def clear(self) -> None:
        self._chunks = []
        self._document_count = 0
        logger.info("✅ Cleared all documents from memory")

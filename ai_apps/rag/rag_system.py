import logging
from dataclasses import dataclass, field
from typing import List, Optional

from langchain_core.embeddings import Embeddings
from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate

from ai_apps.errors import CredentialMissing, EmbeddingUnavailable, NoDocuments
from .vector_db import DocumentStore, ScoredChunk

logger = logging.getLogger(__name__)

REFUSAL_ANSWER = "I don't have enough information in the provided documents to answer this question."

RAG_PROMPT = ChatPromptTemplate.from_template(
    """
Answer the question based only on the following context. If you cannot answer the question based on the context, say "{refusal}"

Context: {context}

Question: {question}

Answer:"""
).partial(refusal=REFUSAL_ANSWER)


@dataclass
class AnswerResult:
    answer: str
    sources: List[str] = field(default_factory=list)


class RAGSystem:
    """
    Answers questions from the chunks held in the document store.
    """

    def __init__(
        self,
        store: DocumentStore,
        embeddings: Optional[Embeddings],
        llm: Optional[BaseChatModel],
        top_k: int = 4,
    ):
        self.store = store
        self.embeddings = embeddings
        self.llm = llm
        self.top_k = top_k

    async def answer(self, question: str) -> AnswerResult:
        if self.store.is_empty:
            raise NoDocuments()

        if self.llm is None or self.embeddings is None:
            raise CredentialMissing("OpenRouter API key not configured")

        try:
            query_vector = await self.embeddings.aembed_query(question)
        except Exception as e:
            logger.error(f"❌ Query embedding error: {e}")
            raise EmbeddingUnavailable(f"Embedding service unavailable: {str(e)}")

        relevant_chunks = self.store.query_top_k(query_vector, k=self.top_k)
        context = self._prepare_context(relevant_chunks)

        chain = RAG_PROMPT | self.llm | StrOutputParser()
        answer = await chain.ainvoke({"context": context, "question": question})

        logger.info(f"✅ Generated RAG answer from {len(relevant_chunks)} chunks")
        return AnswerResult(answer=answer, sources=self._extract_sources(relevant_chunks))

    def _prepare_context(self, relevant_chunks: List[ScoredChunk]) -> str:
        return "\n\n".join(scored.chunk.text for scored in relevant_chunks)

    def _extract_sources(self, relevant_chunks: List[ScoredChunk]) -> List[str]:
        sources = []
        for scored in relevant_chunks:
            if scored.chunk.source_filename not in sources:
                sources.append(scored.chunk.source_filename)
        return sources

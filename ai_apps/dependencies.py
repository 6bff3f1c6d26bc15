"""
FastAPI dependency providers.

Provider clients are built per request from settings; a provider whose
credential is missing resolves to ``None`` so services can answer with
``CredentialMissing`` at the point their contract says so. Tests swap any of
these out through ``app.dependency_overrides``.
"""

from typing import Optional

from fastapi import Depends, Request
from langchain_core.embeddings import Embeddings
from langchain_core.language_models import BaseChatModel

from ai_apps.config import Settings, get_settings
from ai_apps.rag.file_processor import FileProcessor
from ai_apps.rag.rag_system import RAGSystem
from ai_apps.rag.vector_db import DocumentStore, TextChunker
from ai_apps.services.chat import ChatService
from ai_apps.services.classifier import Classifier
from ai_apps.services.gemini import GeminiJSONClient
from ai_apps.services.huggingface import HuggingFaceClient
from ai_apps.services.llm import build_chat_model, build_embeddings, build_gemini
from ai_apps.services.memory import SessionMemoryStore
from ai_apps.services.qna import QnAService
from ai_apps.services.summarizer import Summarizer


def get_document_store(request: Request) -> DocumentStore:
    return request.app.state.document_store


def get_session_memories(request: Request) -> SessionMemoryStore:
    return request.app.state.session_memories


def get_embeddings(settings: Settings = Depends(get_settings)) -> Optional[Embeddings]:
    if not settings.openrouter_configured:
        return None
    return build_embeddings(settings)


def get_rag_llm(settings: Settings = Depends(get_settings)) -> Optional[BaseChatModel]:
    if not settings.openrouter_configured:
        return None
    return build_chat_model(settings, temperature=0.7)


def get_qna_llm(settings: Settings = Depends(get_settings)) -> Optional[BaseChatModel]:
    if not settings.openrouter_configured:
        return None
    # Lower temperature for more factual answers
    return build_chat_model(settings, temperature=0.2)


def get_chat_llm(settings: Settings = Depends(get_settings)) -> Optional[BaseChatModel]:
    if not settings.openrouter_configured:
        return None
    return build_chat_model(settings, temperature=0.7)


def get_gemini_client(settings: Settings = Depends(get_settings)) -> GeminiJSONClient:
    if not settings.gemini_configured:
        return GeminiJSONClient(llm=None)
    return GeminiJSONClient(llm=build_gemini(settings))


def get_huggingface_client(settings: Settings = Depends(get_settings)) -> HuggingFaceClient:
    return HuggingFaceClient(
        token=settings.huggingface_api_token,
        base_url=settings.huggingface_base_url,
        timeout=settings.huggingface_timeout,
    )


def get_file_processor(
    store: DocumentStore = Depends(get_document_store),
    embeddings: Optional[Embeddings] = Depends(get_embeddings),
    settings: Settings = Depends(get_settings),
) -> FileProcessor:
    return FileProcessor(
        store=store,
        embeddings=embeddings,
        chunker=TextChunker(chunk_size=settings.chunk_size, chunk_overlap=settings.chunk_overlap),
        max_file_size=settings.max_file_size,
    )


def get_rag_system(
    store: DocumentStore = Depends(get_document_store),
    embeddings: Optional[Embeddings] = Depends(get_embeddings),
    llm: Optional[BaseChatModel] = Depends(get_rag_llm),
    settings: Settings = Depends(get_settings),
) -> RAGSystem:
    return RAGSystem(store=store, embeddings=embeddings, llm=llm, top_k=settings.top_k_results)


def get_summarizer(
    huggingface: HuggingFaceClient = Depends(get_huggingface_client),
    gemini: GeminiJSONClient = Depends(get_gemini_client),
) -> Summarizer:
    return Summarizer(huggingface=huggingface, gemini=gemini)


def get_classifier(
    huggingface: HuggingFaceClient = Depends(get_huggingface_client),
    gemini: GeminiJSONClient = Depends(get_gemini_client),
) -> Classifier:
    return Classifier(huggingface=huggingface, gemini=gemini)


def get_qna_service(
    llm: Optional[BaseChatModel] = Depends(get_qna_llm),
    gemini: GeminiJSONClient = Depends(get_gemini_client),
) -> QnAService:
    return QnAService(llm=llm, gemini=gemini)


def get_chat_service(
    llm: Optional[BaseChatModel] = Depends(get_chat_llm),
    memories: SessionMemoryStore = Depends(get_session_memories),
) -> Optional[ChatService]:
    if llm is None:
        return None
    return ChatService(llm=llm, memories=memories)

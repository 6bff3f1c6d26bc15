"""
RAG (Retrieval Augmented Generation) System

This module provides an in-memory RAG implementation with:
- Text extraction from PDF, DOCX and plain text uploads
- Recursive chunking with overlap
- Embedding through an OpenAI-compatible gateway
- Exact cosine similarity search over a process-local store
- Answer synthesis with a chat-completion model
"""

from ai_apps.rag.vector_db import DocumentChunk, InMemoryDocumentStore, TextChunker
from ai_apps.rag.rag_system import RAGSystem
from ai_apps.rag.file_processor import FileProcessor

__all__ = [
    "DocumentChunk",
    "InMemoryDocumentStore",
    "TextChunker",
    "RAGSystem",
    "FileProcessor",
]

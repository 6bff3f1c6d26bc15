import asyncio
import io
import logging
from dataclasses import dataclass
from typing import Optional

import docx
import PyPDF2
from fastapi import UploadFile
from langchain_core.embeddings import Embeddings

from ai_apps.errors import (
    CredentialMissing,
    EmbeddingUnavailable,
    InvalidInput,
    PayloadTooLarge,
    UnsupportedMediaType,
)
from .vector_db import DocumentChunk, DocumentStore, TextChunker

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_MIMES = {"text/plain", "text/markdown"}


@dataclass(frozen=True)
class IngestionResult:
    filename: str
    chunk_count: int
    total_documents: int

    @property
    def message(self) -> str:
        return f"Successfully processed {self.filename} into {self.chunk_count} chunks."


def _media_type(content_type: Optional[str]) -> str:
    # "text/plain; charset=utf-8" -> "text/plain"
    return (content_type or "").split(";")[0].strip().lower()


def extract_text(content: bytes, content_type: Optional[str], filename: str) -> str:
    """Extract plain text from raw file bytes according to the declared MIME type"""
    media_type = _media_type(content_type)

    if media_type == PDF_MIME:
        text = _extract_from_pdf(content)
    elif media_type == DOCX_MIME:
        text = _extract_from_docx(content)
    elif media_type in TEXT_MIMES:
        text = _extract_from_text(content)
    else:
        raise UnsupportedMediaType()

    if not text.strip():
        raise InvalidInput(f"Could not extract any text from {filename}")

    logger.info(f"✅ Extracted text from {filename}: {len(text)} characters")
    return text


def _extract_from_pdf(content: bytes) -> str:
    try:
        pdf_reader = PyPDF2.PdfReader(io.BytesIO(content))
        page_texts = [page.extract_text() or "" for page in pdf_reader.pages]
    except Exception as e:
        logger.error(f"❌ PDF extraction error: {e}")
        raise InvalidInput(f"Failed to extract text from PDF: {str(e)}")
    return "\n\n".join(text for text in page_texts if text.strip())


def _extract_from_docx(content: bytes) -> str:
    try:
        document = docx.Document(io.BytesIO(content))
    except Exception as e:
        logger.error(f"❌ DOCX extraction error: {e}")
        raise InvalidInput(f"Failed to extract text from DOCX: {str(e)}")
    return "\n".join(paragraph.text for paragraph in document.paragraphs if paragraph.text.strip())


def _extract_from_text(content: bytes) -> str:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        raise InvalidInput("Could not decode text file. Please ensure it's in UTF-8 format.")


class FileProcessor:
    """
    Handles upload validation, text extraction, chunking and embedding, and
    hands the finished chunks of one file to the document store.
    """

    def __init__(
        self,
        store: DocumentStore,
        embeddings: Optional[Embeddings],
        chunker: TextChunker,
        max_file_size: int = 10485760,
    ):
        self.store = store
        self.embeddings = embeddings
        self.chunker = chunker
        self.max_file_size = max_file_size

    def validate_file(self, content: bytes, content_type: Optional[str]) -> None:
        if len(content) > self.max_file_size:
            raise PayloadTooLarge(
                f"File too large. Maximum size: {self.max_file_size / (1024*1024):.1f}MB"
            )
        media_type = _media_type(content_type)
        if media_type != PDF_MIME and media_type != DOCX_MIME and media_type not in TEXT_MIMES:
            raise UnsupportedMediaType()

    async def ingest(self, content: bytes, content_type: Optional[str], filename: str) -> int:
        """
        Extract, chunk and embed one file, then append it to the store.

        The store is only touched after every chunk has been embedded, so a
        failed ingestion leaves it unchanged.
        """
        self.validate_file(content, content_type)

        if self.embeddings is None:
            raise CredentialMissing("OpenRouter API key not configured")

        text = await asyncio.to_thread(extract_text, content, content_type, filename)
        chunks = self.chunker.chunk_text(text)

        try:
            vectors = await self.embeddings.aembed_documents(chunks)
        except Exception as e:
            logger.error(f"❌ Embedding error for {filename}: {e}")
            raise EmbeddingUnavailable(f"Embedding service unavailable: {str(e)}")

        if len(vectors) != len(chunks):
            raise EmbeddingUnavailable(
                f"Embedding service returned {len(vectors)} vectors for {len(chunks)} chunks"
            )

        document_chunks = [
            DocumentChunk(
                source_filename=filename,
                text=chunk,
                embedding=tuple(float(value) for value in vector),
            )
            for chunk, vector in zip(chunks, vectors)
        ]
        self.store.append(document_chunks)

        logger.info(f"✅ Stored {filename} as {len(document_chunks)} chunks")
        return len(document_chunks)

    async def process_and_store(self, file: UploadFile) -> IngestionResult:
        content = await file.read()
        filename = file.filename or "upload"
        chunk_count = await self.ingest(content, file.content_type, filename)
        return IngestionResult(
            filename=filename,
            chunk_count=chunk_count,
            total_documents=self.store.document_count,
        )

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from starlette.datastructures import UploadFile as StarletteUploadFile

from ai_apps.dependencies import get_document_store, get_file_processor, get_rag_system
from ai_apps.errors import InternalError, InvalidInput
from ai_apps.rag.file_processor import FileProcessor
from ai_apps.rag.models import (
    BatchUploadData,
    BatchUploadItem,
    BatchUploadResponse,
    ClearResponse,
    MessageData,
    QueryData,
    QueryRequest,
    QueryResponse,
    StatusData,
    StatusResponse,
    UploadData,
    UploadResponse,
)
from ai_apps.rag.rag_system import RAGSystem
from ai_apps.rag.vector_db import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rag", tags=["RAG Document Q&A"])


async def _upload(file: Optional[StarletteUploadFile], processor: FileProcessor) -> UploadResponse:
    if file is None or not isinstance(file, StarletteUploadFile):
        raise InvalidInput("No file uploaded")

    result = await processor.process_and_store(file)
    logger.info(f"✅ Document uploaded: {result.filename} ({result.chunk_count} chunks)")
    return UploadResponse(
        data=UploadData(
            filename=result.filename,
            chunk_count=result.chunk_count,
            total_documents=result.total_documents,
            message=result.message,
        )
    )


async def _query(question: Optional[str], rag_system: RAGSystem) -> QueryResponse:
    if not question or not isinstance(question, str):
        raise InvalidInput("Question is required")

    result = await rag_system.answer(question)
    return QueryResponse(
        data=QueryData(
            question=question,
            answer=result.answer,
            total_documents=rag_system.store.document_count,
            sources=result.sources,
        )
    )


def _clear(store: DocumentStore) -> ClearResponse:
    store.clear()
    return ClearResponse(data=MessageData(message="All documents cleared from memory."))


@router.post("/upload", response_model=UploadResponse)
async def upload_document(
    file: Optional[UploadFile] = File(None, description="Document to upload (PDF, DOCX, or TXT)"),
    processor: FileProcessor = Depends(get_file_processor),
):
    """
    Upload a document, split it into chunks and add it to the in-memory store
    """
    try:
        return await _upload(file, processor)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"❌ Document upload error: {e}")
        raise InternalError(str(e))


@router.post("/batch-upload", response_model=BatchUploadResponse)
async def batch_upload_documents(
    files: List[UploadFile] = File(..., description="Multiple documents to upload"),
    processor: FileProcessor = Depends(get_file_processor),
):
    """
    Upload multiple documents at once; each file succeeds or fails on its own
    """
    results = []
    for file in files:
        try:
            result = await processor.process_and_store(file)
            results.append(
                BatchUploadItem(filename=result.filename, status="success", chunk_count=result.chunk_count)
            )
        except HTTPException as e:
            results.append(BatchUploadItem(filename=file.filename or "upload", status="error", error=e.detail))
        except Exception as e:
            logger.error(f"❌ Batch upload error for {file.filename}: {e}")
            results.append(BatchUploadItem(filename=file.filename or "upload", status="error", error=str(e)))

    failed = sum(1 for item in results if item.status == "error")
    logger.info(f"✅ Batch upload completed: {len(results) - failed}/{len(results)} files stored")
    return BatchUploadResponse(
        success=failed == 0,
        data=BatchUploadData(
            total_files=len(files),
            successful_uploads=len(results) - failed,
            failed_uploads=failed,
            total_documents=processor.store.document_count,
            results=results,
        ),
    )


@router.post("/query", response_model=QueryResponse)
async def query_documents(
    query_request: QueryRequest,
    rag_system: RAGSystem = Depends(get_rag_system),
):
    """
    Answer a question from the uploaded documents
    """
    try:
        return await _query(query_request.question, rag_system)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"❌ RAG query error: {e}")
        raise InternalError(str(e))


@router.post("/clear", response_model=ClearResponse)
async def clear_documents(store: DocumentStore = Depends(get_document_store)):
    """
    Remove every document from memory
    """
    return _clear(store)


@router.get("", response_model=StatusResponse)
async def get_status(store: DocumentStore = Depends(get_document_store)):
    """
    Report how many documents are loaded
    """
    has_documents = store.document_count > 0
    return StatusResponse(
        data=StatusData(
            total_documents=store.document_count,
            total_chunks=store.chunk_count,
            has_documents=has_documents,
            status="Ready to answer questions" if has_documents else "No documents uploaded",
        )
    )


@router.post("", response_model=None)
async def dispatch_action(
    request: Request,
    action: Optional[str] = None,
    processor: FileProcessor = Depends(get_file_processor),
    rag_system: RAGSystem = Depends(get_rag_system),
    store: DocumentStore = Depends(get_document_store),
):
    """
    Single-endpoint form: ``?action=upload`` (multipart), ``?action=query``
    (JSON ``{question}``) or ``?action=clear``
    """
    try:
        if action == "upload":
            form = await request.form()
            return await _upload(form.get("file"), processor)
        if action == "query":
            try:
                body = await request.json()
            except ValueError:
                raise InvalidInput("Question is required")
            question = body.get("question") if isinstance(body, dict) else None
            return await _query(question, rag_system)
        if action == "clear":
            return _clear(store)
        raise InvalidInput("Invalid action")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"❌ RAG API error: {e}")
        raise InternalError(str(e))

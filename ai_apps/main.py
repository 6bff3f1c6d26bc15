import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ai_apps.config import get_settings
from ai_apps.middleware import LoggingMiddleware
from ai_apps.rag.vector_db import InMemoryDocumentStore
from ai_apps.routers import chat, classify, qna, rag, summarize
from ai_apps.services.memory import SessionMemoryStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    settings = get_settings()
    logger.info("Starting AI Applications API...")

    # Volatile, process-wide state; gone on restart
    app.state.document_store = InMemoryDocumentStore()
    app.state.session_memories = SessionMemoryStore(max_token_limit=settings.memory_max_token_limit)

    if not settings.openrouter_configured:
        logger.warning("⚠️ OPENROUTER_API_KEY is not set: RAG, Q&A and chat routes will reject requests")
    if not settings.gemini_configured and not settings.huggingface_configured:
        logger.warning("⚠️ Neither HUGGINGFACE_API_TOKEN nor GOOGLE_GEMINI_API_KEY is set")

    yield

    logger.info("Shutting down AI Applications API...")


app = FastAPI(
    title="AI Applications API",
    description="Document Q&A, summarization, classification, Q&A and streaming chat backed by hosted AI providers",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-AI-Persona"],
)
app.add_middleware(LoggingMiddleware)

app.include_router(rag.router)
app.include_router(summarize.router)
app.include_router(classify.router)
app.include_router(qna.router)
app.include_router(chat.router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "message": "AI Applications API is running",
        "version": "1.0.0"
    }


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": "Welcome to the AI Applications API",
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Rejected request body for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": "Invalid request body"},
    )


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "ai_apps.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="info" if settings.debug else "warning"
    )

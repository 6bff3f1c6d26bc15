import logging
from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse, StreamingResponse

from ai_apps.dependencies import get_chat_service, get_session_memories
from ai_apps.models.schemas import APIResponse, PersonaInfo, PersonaListResponse
from ai_apps.services.chat import AI_PERSONAS, ChatService, get_persona
from ai_apps.services.memory import SessionMemoryStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Chat"])

CREDENTIAL_ERROR = "OpenRouter API key not configured. Please add your API key to .env"


async def _read_messages(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON body")
    if not isinstance(body, dict) or not isinstance(body.get("messages"), list) or not body["messages"]:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid messages format")
    return body


async def _start_stream(fragments: AsyncIterator[str], headers: Optional[dict] = None):
    """
    Wait for the first fragment before committing to a 200 response, so a
    failing upstream call still gets a plain-text error status.
    """
    try:
        first = await fragments.__anext__()
    except StopAsyncIteration:
        first = ""
    except Exception as e:
        logger.error(f"❌ Chat stream failed before start: {e}")
        return PlainTextResponse(f"Error: {e}", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    async def body() -> AsyncIterator[str]:
        try:
            if first:
                yield first
            async for fragment in fragments:
                yield fragment
        finally:
            await fragments.aclose()

    response_headers = {"Cache-Control": "no-cache"}
    response_headers.update(headers or {})
    return StreamingResponse(body(), media_type="text/plain; charset=utf-8", headers=response_headers)


@router.post("/chat")
async def chat(request: Request, chat_service: Optional[ChatService] = Depends(get_chat_service)):
    """
    Stream a reply to the client-held conversation; nothing is stored server-side
    """
    if chat_service is None:
        return PlainTextResponse(CREDENTIAL_ERROR, status_code=status.HTTP_400_BAD_REQUEST)

    try:
        body = await _read_messages(request)
        fragments = chat_service.stream_basic(body["messages"])
    except HTTPException as e:
        return PlainTextResponse(str(e.detail), status_code=e.status_code)

    return await _start_stream(fragments)


@router.post("/chat-enhanced")
async def chat_enhanced(request: Request, chat_service: Optional[ChatService] = Depends(get_chat_service)):
    """
    Stream a persona-conditioned reply using the session's summarizing memory
    """
    if chat_service is None:
        return PlainTextResponse(CREDENTIAL_ERROR, status_code=status.HTTP_400_BAD_REQUEST)

    try:
        body = await _read_messages(request)
        persona = get_persona(body.get("persona"))
        session_id = body.get("sessionId") or "default"
        if not isinstance(session_id, str):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid sessionId")
        fragments = chat_service.stream_enhanced(body["messages"], persona, session_id)
    except HTTPException as e:
        return PlainTextResponse(str(e.detail), status_code=e.status_code)

    logger.info(f"Streaming {persona.key} reply for session {session_id}")
    return await _start_stream(fragments, headers={"X-AI-Persona": persona.name})


@router.get("/chat-enhanced/personas", response_model=PersonaListResponse)
async def list_personas():
    return PersonaListResponse(
        data=[PersonaInfo(key=p.key, name=p.name, icon=p.icon) for p in AI_PERSONAS.values()]
    )


@router.delete("/chat-enhanced/sessions/{session_id}", response_model=APIResponse)
async def clear_session(session_id: str, memories: SessionMemoryStore = Depends(get_session_memories)):
    """
    Forget a session's conversation memory
    """
    if not memories.clear(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown session: {session_id}")
    return APIResponse(message=f"Conversation memory cleared for session {session_id}")

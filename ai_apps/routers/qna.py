import logging

from fastapi import APIRouter, Depends, HTTPException

from ai_apps.dependencies import get_qna_service
from ai_apps.errors import InternalError
from ai_apps.models.schemas import QnAData, QnARequest, QnAResponse
from ai_apps.services.qna import QnAService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/qna", tags=["Q&A"])


@router.post("", response_model=QnAResponse)
async def answer_question(
    qna_request: QnARequest,
    qna_service: QnAService = Depends(get_qna_service),
):
    try:
        result = await qna_service.answer(qna_request.question, qna_request.context)
        return QnAResponse(
            data=QnAData(
                question=result.question,
                answer=result.answer,
                context=result.context,
                confidence=result.confidence,
            )
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"❌ Q&A API error: {e}")
        raise InternalError(str(e))

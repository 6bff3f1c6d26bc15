import logging

from fastapi import APIRouter, Depends, HTTPException

from ai_apps.dependencies import get_summarizer
from ai_apps.errors import InternalError
from ai_apps.models.schemas import SummarizationData, SummarizeRequest, SummarizeResponse
from ai_apps.services.summarizer import Summarizer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/summarize", tags=["Summarization"])


@router.post("", response_model=SummarizeResponse)
async def summarize_text(
    summarize_request: SummarizeRequest,
    summarizer: Summarizer = Depends(get_summarizer),
):
    """
    Summarize 50-10,000 characters of text
    """
    try:
        result = await summarizer.summarize(
            summarize_request.text,
            model=summarize_request.model,
            summary_type=summarize_request.summary_type,
        )
        return SummarizeResponse(
            data=SummarizationData(
                original_text=result.original_text,
                summary=result.summary,
                word_count=result.word_count,
                compression_ratio=result.compression_ratio,
            )
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"❌ Summarization API error: {e}")
        raise InternalError(str(e))

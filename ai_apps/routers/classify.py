import logging

from fastapi import APIRouter, Depends, HTTPException

from ai_apps.dependencies import get_classifier
from ai_apps.errors import InternalError
from ai_apps.models.schemas import Category, ClassificationData, ClassifyRequest, ClassifyResponse
from ai_apps.services.classifier import Classifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/classify", tags=["Classification"])


@router.post("", response_model=ClassifyResponse)
async def classify_text(
    classify_request: ClassifyRequest,
    classifier: Classifier = Depends(get_classifier),
):
    """
    Classify text by sentiment, topic or emotion
    """
    try:
        result = await classifier.classify(
            classify_request.text,
            classify_request.model,
            custom_labels=classify_request.custom_labels,
        )
        return ClassifyResponse(
            data=ClassificationData(
                label=result.label,
                confidence=result.confidence,
                categories=[Category(name=c.name, score=c.score) for c in result.categories],
            )
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"❌ Classification API error: {e}")
        raise InternalError(str(e))

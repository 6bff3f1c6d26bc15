from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SummarizeRequest(CamelModel):
    text: Any = None
    model: Optional[str] = "bart-cnn"
    summary_type: str = "concise"


class SummarizationData(CamelModel):
    original_text: str
    summary: str
    word_count: int
    compression_ratio: int


class SummarizeResponse(CamelModel):
    success: bool = True
    data: SummarizationData


class ClassifyRequest(CamelModel):
    text: Any = None
    model: Optional[str] = None
    custom_labels: Optional[List[str]] = None


class Category(CamelModel):
    name: str
    score: int


class ClassificationData(CamelModel):
    label: str
    confidence: int
    categories: List[Category] = Field(default_factory=list)


class ClassifyResponse(CamelModel):
    success: bool = True
    data: ClassificationData


class QnARequest(CamelModel):
    question: Any = None
    context: Optional[str] = ""


class QnAData(CamelModel):
    question: str
    answer: str
    context: str
    confidence: int


class QnAResponse(CamelModel):
    success: bool = True
    data: QnAData


class PersonaInfo(CamelModel):
    key: str
    name: str
    icon: str


class PersonaListResponse(CamelModel):
    success: bool = True
    data: List[PersonaInfo]


class APIResponse(BaseModel):
    message: str
    success: bool = True
    data: Optional[dict] = None

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QueryRequest(BaseModel):
    question: Optional[str] = None


class UploadData(CamelModel):
    filename: str
    chunk_count: int
    total_documents: int
    message: str


class UploadResponse(CamelModel):
    success: bool = True
    data: UploadData


class BatchUploadItem(CamelModel):
    filename: str
    status: str
    chunk_count: Optional[int] = None
    error: Optional[str] = None


class BatchUploadData(CamelModel):
    total_files: int
    successful_uploads: int
    failed_uploads: int
    total_documents: int
    results: List[BatchUploadItem]


class BatchUploadResponse(CamelModel):
    success: bool
    data: BatchUploadData


class QueryData(CamelModel):
    question: str
    answer: str
    total_documents: int
    sources: List[str] = Field(default_factory=list)


class QueryResponse(CamelModel):
    success: bool = True
    data: QueryData


class MessageData(CamelModel):
    message: str


class ClearResponse(CamelModel):
    success: bool = True
    data: MessageData


class StatusData(CamelModel):
    total_documents: int
    total_chunks: int
    has_documents: bool
    status: str


class StatusResponse(CamelModel):
    success: bool = True
    data: StatusData

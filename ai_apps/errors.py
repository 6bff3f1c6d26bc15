"""
User-visible error taxonomy.

Every class here is an ``HTTPException`` so services can raise them directly
and routers re-raise them untouched; the application-level handler renders
them as ``{"success": false, "error": detail}``.
"""

from fastapi import HTTPException, status


class InvalidInput(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class CredentialMissing(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class UnsupportedMediaType(HTTPException):
    def __init__(self, detail: str = "Unsupported file type. Please upload PDF, DOCX, or TXT files."):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NoDocuments(HTTPException):
    def __init__(self, detail: str = "No documents have been uploaded yet."):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class PayloadTooLarge(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=detail)


class EmbeddingUnavailable(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


class AllProvidersUnavailable(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


class InternalError(HTTPException):
    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Server error: {message}",
        )


class ProviderError(RuntimeError):
    """A single provider call failed; consumed by the fallback chain."""

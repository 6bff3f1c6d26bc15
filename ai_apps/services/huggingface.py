import logging
from typing import Any, Optional

import httpx

from ai_apps.config import credential_configured
from ai_apps.errors import ProviderError

logger = logging.getLogger(__name__)


class HuggingFaceClient:
    """
    Thin async client for the Hugging Face hosted inference API.

    Raises ``ProviderError`` for a missing token, transport errors and
    non-2xx responses; payload interpretation is left to the caller.
    """

    def __init__(
        self,
        token: Optional[str],
        base_url: str = "https://router.huggingface.co/hf-inference/models",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return credential_configured(self.token)

    async def infer(self, model_id: str, payload: dict) -> Any:
        if not self.configured:
            raise ProviderError("Hugging Face API token not configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.base_url}/{model_id}",
                    headers={"Authorization": f"Bearer {self.token}"},
                    json=payload,
                )
        except httpx.HTTPError as e:
            raise ProviderError(f"Hugging Face request failed: {e}") from e

        if response.is_error:
            raise ProviderError(f"Hugging Face API error: {response.text}")

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"Hugging Face returned invalid JSON: {e}") from e

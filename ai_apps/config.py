from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()

# Values shipped in the sample .env; treated the same as an unset key
PLACEHOLDER_CREDENTIALS = {
    "your_openrouter_api_key_here",
    "your_gemini_api_key_here",
    "your_huggingface_token_here",
}


def credential_configured(value: Optional[str]) -> bool:
    return bool(value and value.strip() and value.strip() not in PLACEHOLDER_CREDENTIALS)


class Settings(BaseSettings):
    # App Configuration
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # OpenRouter (OpenAI-compatible) gateway for chat completions and embeddings
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    chat_model: str = "meta-llama/llama-3.2-3b-instruct:free"
    embedding_model: str = "openai/text-embedding-3-small"

    # Google Gemini fallback
    google_gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"

    # Hugging Face inference API
    huggingface_api_token: str = ""
    huggingface_base_url: str = "https://router.huggingface.co/hf-inference/models"
    huggingface_timeout: float = 60.0

    # RAG Settings
    chunk_size: int = 1000
    chunk_overlap: int = 200
    top_k_results: int = 4

    # File Upload Settings
    max_file_size: int = 10485760  # 10MB

    # Conversation memory
    memory_max_token_limit: int = 2000

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def openrouter_configured(self) -> bool:
        return credential_configured(self.openrouter_api_key)

    @property
    def gemini_configured(self) -> bool:
        return credential_configured(self.google_gemini_api_key)

    @property
    def huggingface_configured(self) -> bool:
        return credential_configured(self.huggingface_api_token)


@lru_cache
def get_settings() -> Settings:
    return Settings()

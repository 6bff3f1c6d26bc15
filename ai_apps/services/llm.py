from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI, OpenAIEmbeddings

from ai_apps.config import Settings


def build_chat_model(settings: Settings, temperature: float = 0.7) -> ChatOpenAI:
    """Chat-completion model served through the OpenRouter gateway"""
    return ChatOpenAI(
        model=settings.chat_model,
        api_key=settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        temperature=temperature,
    )


def build_embeddings(settings: Settings) -> OpenAIEmbeddings:
    return OpenAIEmbeddings(
        model=settings.embedding_model,
        api_key=settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        # OpenRouter expects raw strings, not pre-tokenized input
        check_embedding_ctx_length=False,
    )


def build_gemini(settings: Settings) -> ChatGoogleGenerativeAI:
    return ChatGoogleGenerativeAI(
        model=settings.gemini_model,
        temperature=0.1,
        google_api_key=settings.google_gemini_api_key,
    )

import pytest
from langchain_core.language_models import FakeListChatModel

from ai_apps.errors import AllProvidersUnavailable, CredentialMissing, InvalidInput
from ai_apps.services.gemini import GeminiJSONClient
from ai_apps.services.qna import PLACEHOLDER_CONFIDENCE, QnAService
from tests.fakes import ExplodingChatModel, RecordingChatModel


@pytest.mark.asyncio
async def test_openrouter_answer_includes_context() -> None:
    llm = RecordingChatModel(responses=["Paris."])
    service = QnAService(llm=llm, gemini=GeminiJSONClient(llm=None))

    result = await service.answer("Capital of France?", "Geography quiz")

    assert result.answer == "Paris."
    assert result.context == "Geography quiz"
    assert result.confidence == PLACEHOLDER_CONFIDENCE
    human = llm.received[0][-1].content
    assert "Question: Capital of France?" in human
    assert "Geography quiz" in human


@pytest.mark.asyncio
async def test_falls_back_to_gemini_when_openrouter_fails() -> None:
    gemini = GeminiJSONClient(llm=FakeListChatModel(responses=['```json\n{"answer": "Paris, from Gemini."}\n```']))
    service = QnAService(llm=ExplodingChatModel(), gemini=gemini)

    result = await service.answer("Capital of France?")

    assert result.answer == "Paris, from Gemini."
    assert result.context == ""


@pytest.mark.asyncio
async def test_blank_openrouter_answer_falls_back() -> None:
    gemini = GeminiJSONClient(llm=FakeListChatModel(responses=['{"answer": "Fallback answer."}']))
    service = QnAService(llm=FakeListChatModel(responses=["   "]), gemini=gemini)

    assert (await service.answer("Anything?")).answer == "Fallback answer."


@pytest.mark.asyncio
async def test_every_provider_failing_is_service_unavailable() -> None:
    gemini = GeminiJSONClient(llm=FakeListChatModel(responses=['{"unexpected": true}']))
    service = QnAService(llm=ExplodingChatModel(), gemini=gemini)

    with pytest.raises(AllProvidersUnavailable) as exc_info:
        await service.answer("Capital of France?")

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
@pytest.mark.parametrize("question", [None, "", 42])
async def test_question_is_required(question) -> None:
    service = QnAService(llm=ExplodingChatModel(), gemini=GeminiJSONClient(llm=None))

    with pytest.raises(InvalidInput):
        await service.answer(question)


@pytest.mark.asyncio
async def test_missing_openrouter_credential() -> None:
    gemini = GeminiJSONClient(llm=FakeListChatModel(responses=['{"answer": "unused"}']))

    with pytest.raises(CredentialMissing):
        await QnAService(llm=None, gemini=gemini).answer("Capital of France?")

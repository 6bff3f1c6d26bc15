import pytest
from langchain_core.language_models import FakeListChatModel

from ai_apps.errors import AllProvidersUnavailable, CredentialMissing, InvalidInput
from ai_apps.services.gemini import GeminiJSONClient
from ai_apps.services.summarizer import (
    Summarizer,
    compression_ratio,
    count_words,
    model_order,
    parse_huggingface_summary,
)
from tests.fakes import FakeHuggingFace

LONG_TEXT = " ".join(f"word{index}" for index in range(100))
SUMMARY_20 = " ".join(f"sum{index}" for index in range(20))


def test_compression_ratio_for_100_to_20_words() -> None:
    assert count_words(LONG_TEXT) == 100
    assert compression_ratio(LONG_TEXT, SUMMARY_20) == 80


def test_word_count_splits_on_whitespace_runs() -> None:
    assert count_words("  one\t two\n\nthree  ") == 3


def test_model_order_puts_preferred_first_without_repeats() -> None:
    assert model_order("pegasus") == ["pegasus", "bart-cnn", "t5-small"]
    assert model_order("t5-small") == ["t5-small", "bart-cnn"]
    assert model_order("unknown") == ["bart-cnn", "t5-small"]


@pytest.mark.parametrize(
    "payload, expected",
    [
        ([{"summary_text": "a"}], "a"),
        ([{"generated_text": "b"}], "b"),
        ("c", "c"),
    ],
)
def test_parse_huggingface_summary_shapes(payload, expected) -> None:
    assert parse_huggingface_summary(payload) == expected


def test_parse_huggingface_summary_rejects_unknown_shape() -> None:
    with pytest.raises(ValueError):
        parse_huggingface_summary({"error": "loading"})


@pytest.mark.asyncio
async def test_short_text_is_rejected_before_any_provider_call() -> None:
    huggingface = FakeHuggingFace({})
    summarizer = Summarizer(huggingface=huggingface, gemini=GeminiJSONClient(llm=None))

    with pytest.raises(InvalidInput) as exc_info:
        await summarizer.summarize("too short")

    assert exc_info.value.status_code == 400
    assert huggingface.calls == []


@pytest.mark.asyncio
async def test_falls_through_huggingface_models_in_order() -> None:
    huggingface = FakeHuggingFace({"t5-small": [{"summary_text": f"  {SUMMARY_20}  "}]})
    summarizer = Summarizer(huggingface=huggingface, gemini=GeminiJSONClient(llm=None))

    result = await summarizer.summarize(LONG_TEXT, model="pegasus")

    assert [model_id for model_id, _ in huggingface.calls] == [
        "google/pegasus-large",
        "facebook/bart-large-cnn",
        "t5-small",
    ]
    assert huggingface.calls[0][1]["parameters"] == {"max_length": 150, "min_length": 30, "do_sample": False}
    assert result.summary == SUMMARY_20
    assert result.word_count == 20
    assert result.compression_ratio == 80


@pytest.mark.asyncio
async def test_gemini_fallback_parses_fenced_json() -> None:
    gemini = GeminiJSONClient(llm=FakeListChatModel(responses=['```json\n{"summary": "Gemini summary here."}\n```']))
    summarizer = Summarizer(huggingface=FakeHuggingFace({}, configured=False), gemini=gemini)

    result = await summarizer.summarize(LONG_TEXT)

    assert result.summary == "Gemini summary here."
    assert result.word_count == 3
    assert result.compression_ratio == 97


@pytest.mark.asyncio
async def test_every_provider_failing_is_service_unavailable() -> None:
    gemini = GeminiJSONClient(llm=FakeListChatModel(responses=["not json at all"]))
    summarizer = Summarizer(huggingface=FakeHuggingFace({}), gemini=gemini)

    with pytest.raises(AllProvidersUnavailable) as exc_info:
        await summarizer.summarize(LONG_TEXT)

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_no_configured_provider_is_a_credential_error() -> None:
    summarizer = Summarizer(huggingface=FakeHuggingFace({}, configured=False), gemini=GeminiJSONClient(llm=None))

    with pytest.raises(CredentialMissing):
        await summarizer.summarize(LONG_TEXT)

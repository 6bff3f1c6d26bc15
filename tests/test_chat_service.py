import asyncio

import pytest
from langchain_core.language_models import FakeListChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from ai_apps.errors import InvalidInput
from ai_apps.services.chat import AI_PERSONAS, ChatService, _followups, create_prompt_template, get_persona
from ai_apps.services.memory import SessionMemoryStore
from ai_apps.services.streaming import ChannelClosed, FragmentChannel
from tests.fakes import ExplodingChatModel, StallingChatModel


async def _collect(fragments) -> list:
    return [fragment async for fragment in fragments]


@pytest.mark.asyncio
async def test_basic_stream_fragments_concatenate_to_reply() -> None:
    service = ChatService(llm=FakeListChatModel(responses=["Hello there!"]))

    fragments = await _collect(service.stream_basic([{"role": "user", "content": "Hi"}]))

    assert len(fragments) > 1
    assert "".join(fragments) == "Hello there!"


@pytest.mark.asyncio
async def test_enhanced_stream_saves_turn_after_completion() -> None:
    memories = SessionMemoryStore()
    service = ChatService(llm=FakeListChatModel(responses=["Use a list comprehension."]), memories=memories)
    messages = [{"role": "user", "content": "How do I square numbers in Python?"}]

    reply = "".join(await _collect(service.stream_enhanced(messages, get_persona("developer"), "s1")))

    memory = memories.get_or_create("s1", service.llm)
    assert [message.content for message in memory.load_messages()] == [
        "How do I square numbers in Python?",
        reply,
    ]
    assert "s2" not in memories


@pytest.mark.asyncio
async def test_abandoned_stream_is_not_remembered() -> None:
    memories = SessionMemoryStore()
    service = ChatService(llm=FakeListChatModel(responses=["A fairly long reply"]), memories=memories)

    fragments = service.stream_enhanced([{"role": "user", "content": "hi"}], get_persona("general"), "s1")
    first = await fragments.__anext__()
    await fragments.aclose()
    await asyncio.sleep(0.01)

    assert first == "A"
    assert memories.get_or_create("s1", service.llm).load_messages() == []


@pytest.mark.asyncio
async def test_upstream_error_reaches_consumer() -> None:
    service = ChatService(llm=ExplodingChatModel())

    with pytest.raises(RuntimeError, match="chat provider down"):
        await _collect(service.stream_basic([{"role": "user", "content": "Hi"}]))


def test_unknown_persona_is_invalid() -> None:
    with pytest.raises(InvalidInput):
        get_persona("pirate")
    assert get_persona(None) is AI_PERSONAS["general"]


def test_prompt_template_places_history_between_system_and_input() -> None:
    persona = get_persona("analyst")
    messages = create_prompt_template(persona).format_messages(
        history=[HumanMessage(content="earlier")], input="now"
    )

    assert messages[0] == SystemMessage(content=persona.system_prompt)
    assert [message.content for message in messages[1:]] == ["earlier", "now"]


@pytest.mark.parametrize(
    "messages",
    [[{"role": "robot", "content": "x"}], [{"role": "user"}], ["plain string"]],
)
def test_malformed_messages_are_rejected(messages) -> None:
    service = ChatService(llm=FakeListChatModel(responses=["x"]))
    with pytest.raises(InvalidInput):
        service.stream_basic(messages)


@pytest.mark.asyncio
async def test_channel_send_after_close_raises() -> None:
    channel = FragmentChannel()
    channel.close()

    assert channel.closed
    with pytest.raises(ChannelClosed):
        await channel.send("late")
    assert await _collect(channel) == []


@pytest.mark.asyncio
async def test_stream_ends_before_memory_summary_and_survives_its_cancellation() -> None:
    llm = StallingChatModel(responses=["ok"])
    memories = SessionMemoryStore(max_token_limit=1)
    service = ChatService(llm=llm, memories=memories)

    fragments = service.stream_enhanced([{"role": "user", "content": "hi"}], get_persona("general"), "s1")
    reply = "".join(await asyncio.wait_for(_collect(fragments), timeout=5))

    assert reply == "ok"
    pending = list(_followups)
    assert len(pending) == 1

    pending[0].cancel()
    await asyncio.gather(*pending, return_exceptions=True)

    memory = memories.get_or_create("s1", llm)
    assert memory.summary == ""
    assert [message.content for message in memory.load_messages()] == ["hi", "ok"]
    assert not _followups


@pytest.mark.parametrize("key", [["developer"], 3, {"name": "general"}])
def test_non_string_persona_is_invalid(key) -> None:
    with pytest.raises(InvalidInput):
        get_persona(key)


@pytest.mark.asyncio
async def test_channel_reports_finished_after_end_marker() -> None:
    channel = FragmentChannel()
    await channel.finish()

    assert channel.finished
    assert await _collect(channel) == []

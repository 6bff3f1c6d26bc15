import asyncio
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Sequence, Set

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder

from ai_apps.errors import InvalidInput
from .memory import SessionMemoryStore
from .streaming import ChannelClosed, FragmentChannel

logger = logging.getLogger(__name__)

# Producers still running post-stream work after their consumer finished
_followups: Set[asyncio.Task] = set()


@dataclass(frozen=True)
class Persona:
    key: str
    name: str
    icon: str
    system_prompt: str


AI_PERSONAS: Dict[str, Persona] = {
    "developer": Persona(
        key="developer",
        name="Developer Assistant",
        icon="👨‍💻",
        system_prompt="""You are an expert software developer with 10+ years of experience across multiple programming languages and frameworks.

Your expertise includes:
- Full-stack development (Frontend: React, Vue, Angular | Backend: Node.js, Python, Java)
- Database design and optimization
- System architecture and design patterns
- DevOps and deployment strategies
- Code review and best practices

Always provide:
1. Clear, actionable solutions
2. Code examples with comments
3. Best practices and potential pitfalls
4. Performance considerations
5. Testing recommendations

Communicate in a professional yet friendly manner. Ask clarifying questions when needed.""",
    ),
    "creative": Persona(
        key="creative",
        name="Creative Assistant",
        icon="🎨",
        system_prompt="""You are a creative professional with expertise in writing, design, and content creation.

Your specialties include:
- Creative writing (stories, scripts, poetry)
- Content marketing and copywriting
- Brand strategy and messaging
- Design thinking and user experience
- Social media content creation

Always provide:
1. Original, engaging content
2. Multiple creative options when possible
3. Reasoning behind creative decisions
4. Actionable next steps
5. Industry best practices

Be inspiring, innovative, and help users think outside the box.""",
    ),
    "analyst": Persona(
        key="analyst",
        name="Business Analyst",
        icon="📊",
        system_prompt="""You are a senior business analyst with expertise in data analysis, strategy, and business intelligence.

Your core competencies:
- Data analysis and interpretation
- Business process optimization
- Strategic planning and market analysis
- Financial modeling and projections
- Risk assessment and mitigation

Always provide:
1. Data-driven insights
2. Clear recommendations with rationale
3. Risk-benefit analysis
4. Implementation roadmaps
5. Key performance indicators (KPIs)

Communicate with precision, clarity, and business acumen.""",
    ),
    "general": Persona(
        key="general",
        name="AI Assistant",
        icon="🤖",
        system_prompt="""You are a knowledgeable and helpful AI assistant designed to provide accurate, well-structured responses across various topics.

Your approach:
- Provide comprehensive yet concise answers
- Structure information clearly with headers, lists, and examples
- Admit when you don't know something
- Ask clarifying questions when needed
- Maintain a friendly and professional tone

Always strive to be helpful, accurate, and educational in your responses.""",
    ),
}


def get_persona(key: Any) -> Persona:
    if key is None or key == "":
        key = "general"
    if not isinstance(key, str):
        raise InvalidInput("Invalid persona")
    persona = AI_PERSONAS.get(key)
    if persona is None:
        raise InvalidInput(f"Unknown persona '{key}'. Choose one of: {', '.join(AI_PERSONAS)}")
    return persona


def create_prompt_template(persona: Persona) -> ChatPromptTemplate:
    return ChatPromptTemplate.from_messages(
        [
            SystemMessage(content=persona.system_prompt),
            MessagesPlaceholder("history"),
            ("human", "{input}"),
        ]
    )


def to_langchain_messages(messages: Sequence[dict]) -> List[BaseMessage]:
    """Convert front-end chat messages ({role, content, ...}) into LangChain messages"""
    converted: List[BaseMessage] = []
    for message in messages:
        if not isinstance(message, dict) or not isinstance(message.get("content"), str):
            raise InvalidInput("Invalid messages format")
        role = message.get("role")
        if role == "user":
            converted.append(HumanMessage(content=message["content"]))
        elif role == "assistant":
            converted.append(AIMessage(content=message["content"]))
        elif role == "system":
            converted.append(SystemMessage(content=message["content"]))
        else:
            raise InvalidInput(f"Invalid message role: {role}")
    return converted


def last_user_input(messages: Sequence[dict]) -> str:
    if not messages:
        raise InvalidInput("Invalid messages format")
    last = messages[-1]
    if not isinstance(last, dict) or not isinstance(last.get("content"), str) or not last["content"].strip():
        raise InvalidInput("Invalid messages format")
    return last["content"]


class ChatService:
    """
    Streams chat-completion replies fragment by fragment.

    The model call runs in a producer task feeding a ``FragmentChannel``;
    the returned async iterator is the consumer. Closing the iterator before
    the end of the stream cancels the producer, and a partially streamed turn
    is never retried or stored. ``on_complete`` runs after the end of the
    stream has been signalled, so the client never waits on it.
    """

    def __init__(self, llm: BaseChatModel, memories: Optional[SessionMemoryStore] = None):
        self.llm = llm
        self.memories = memories

    def stream_basic(self, messages: Sequence[dict]) -> AsyncIterator[str]:
        persona = AI_PERSONAS["general"]
        history = to_langchain_messages(messages)
        if not history:
            raise InvalidInput("Invalid messages format")
        return self.stream_reply([SystemMessage(content=persona.system_prompt), *history])

    def stream_enhanced(self, messages: Sequence[dict], persona: Persona, session_id: str) -> AsyncIterator[str]:
        user_input = last_user_input(messages)
        memory = self.memories.get_or_create(session_id, self.llm)
        prompt_messages = create_prompt_template(persona).format_messages(
            history=memory.load_messages(), input=user_input
        )

        async def remember(reply: str) -> None:
            memory.add_turn(user_input, reply)
            await memory.prune()

        return self.stream_reply(prompt_messages, on_complete=remember)

    async def stream_reply(
        self,
        messages: List[BaseMessage],
        on_complete: Optional[Callable[[str], Awaitable[None]]] = None,
    ) -> AsyncIterator[str]:
        channel = FragmentChannel()
        producer = asyncio.create_task(self._produce(channel, messages, on_complete))
        try:
            async for fragment in channel:
                yield fragment
        finally:
            channel.close()
            if not producer.done():
                if channel.finished:
                    # Stream delivered; let the memory update run to completion
                    _followups.add(producer)
                    producer.add_done_callback(_followups.discard)
                else:
                    producer.cancel()

    async def _produce(
        self,
        channel: FragmentChannel,
        messages: List[BaseMessage],
        on_complete: Optional[Callable[[str], Awaitable[None]]],
    ) -> None:
        parts: List[str] = []
        try:
            async for chunk in self.llm.astream(messages):
                fragment = chunk.content if isinstance(chunk.content, str) else ""
                if not fragment:
                    continue
                parts.append(fragment)
                await channel.send(fragment)
        except ChannelClosed:
            logger.info(f"Client disconnected after {len(parts)} fragments, abandoning stream")
            return
        except Exception as e:
            logger.error(f"❌ Streaming error: {e}")
            await channel.finish(e)
            return

        await channel.finish()
        if not channel.finished or on_complete is None:
            return

        try:
            await on_complete("".join(parts))
        except Exception as e:
            logger.error(f"❌ Post-stream update failed: {e}")

import asyncio
import logging
from typing import Callable, Dict, List, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage, get_buffer_string
from langchain_core.messages.utils import count_tokens_approximately
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = ChatPromptTemplate.from_template(
    """Progressively summarize the lines of conversation provided, adding onto the previous summary returning a new summary.

Current summary:
{summary}

New lines of conversation:
{new_lines}

New summary:"""
)


class ConversationSummaryBuffer:
    """
    Rolling conversation memory for one session.

    Recent turns are kept verbatim. Once they exceed ``max_token_limit`` the
    oldest messages are evicted and folded into a running summary written by
    the same chat model.
    """

    def __init__(
        self,
        llm: BaseChatModel,
        max_token_limit: int = 2000,
        token_counter: Callable[[Sequence[BaseMessage]], int] = count_tokens_approximately,
    ):
        self.llm = llm
        self.max_token_limit = max_token_limit
        self.token_counter = token_counter
        self.summary = ""
        self.messages: List[BaseMessage] = []
        self._prune_lock = asyncio.Lock()

    def load_messages(self) -> List[BaseMessage]:
        history: List[BaseMessage] = []
        if self.summary:
            history.append(SystemMessage(content=self.summary))
        history.extend(self.messages)
        return history

    def add_turn(self, user_input: str, assistant_output: str) -> None:
        self.messages.extend([HumanMessage(content=user_input), AIMessage(content=assistant_output)])

    async def save_turn(self, user_input: str, assistant_output: str) -> None:
        self.add_turn(user_input, assistant_output)
        await self.prune()

    def _evict_count(self) -> int:
        evict = 0
        while evict < len(self.messages) and self.token_counter(self.messages[evict:]) > self.max_token_limit:
            evict += 1
        return evict

    async def prune(self) -> None:
        """
        Fold the oldest messages into the summary until the rest fit the limit.

        Messages are only removed once the new summary exists, so a failed or
        cancelled summary call leaves the buffer exactly as it was.
        """
        async with self._prune_lock:
            evict = self._evict_count()
            if evict == 0:
                return

            pruned = self.messages[:evict]
            chain = SUMMARY_PROMPT | self.llm | StrOutputParser()
            try:
                summary = await chain.ainvoke({"summary": self.summary, "new_lines": get_buffer_string(pruned)})
            except Exception as e:
                logger.warning(f"⚠️ Conversation summary failed, keeping {len(pruned)} messages verbatim: {e}")
                return

            # Only prune removes from the front, so the first ``evict`` entries are still ``pruned``
            self.summary = summary.strip()
            del self.messages[:evict]

        logger.info(f"✅ Folded {len(pruned)} messages into the running summary")


class SessionMemoryStore:
    """Session id -> ConversationSummaryBuffer, process-local."""

    def __init__(self, max_token_limit: int = 2000):
        self.max_token_limit = max_token_limit
        self._memories: Dict[str, ConversationSummaryBuffer] = {}

    def get_or_create(self, session_id: str, llm: BaseChatModel) -> ConversationSummaryBuffer:
        memory = self._memories.get(session_id)
        if memory is None:
            memory = ConversationSummaryBuffer(llm=llm, max_token_limit=self.max_token_limit)
            self._memories[session_id] = memory
        return memory

    def clear(self, session_id: str) -> bool:
        return self._memories.pop(session_id, None) is not None

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._memories

    def __len__(self) -> int:
        return len(self._memories)

import logging
from dataclasses import dataclass
from typing import Any, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate

from ai_apps.errors import CredentialMissing, InvalidInput
from .fallback import Candidate, FallbackChain
from .gemini import GeminiJSONClient

logger = logging.getLogger(__name__)

# Not derived from any model signal
PLACEHOLDER_CONFIDENCE = 95

QA_SYSTEM_PROMPT = """You are a highly knowledgeable Q&A assistant. Your goal is to provide accurate, concise, and well-structured answers to the user's questions. If you don't know the answer, say so.

Here are your instructions:
1.  **Analyze the question**: Understand the user's intent and what they are asking.
2.  **Provide a direct answer**: Start with a direct answer to the question.
3.  **Elaborate with details**: Provide additional context, examples, or explanations to support your answer.
4.  **Structure your response**: Use lists, bullet points, and bolding to make the information easy to digest.
5.  **Be concise**: Do not provide irrelevant information.
6.  **Maintain a professional tone**: Be helpful, polite, and respectful."""

QA_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", QA_SYSTEM_PROMPT),
        ("human", "Question: {question}\n\nContext (if any):\n{context}"),
    ]
)


@dataclass
class QnAResult:
    question: str
    answer: str
    context: str
    confidence: int = PLACEHOLDER_CONFIDENCE


class QnAService:
    def __init__(self, llm: Optional[BaseChatModel], gemini: GeminiJSONClient):
        self.llm = llm
        self.gemini = gemini

    async def answer(self, question: Any, context: Optional[str] = "") -> QnAResult:
        if not question or not isinstance(question, str):
            raise InvalidInput("Question is required")
        if self.llm is None:
            raise CredentialMissing("OpenRouter API key not configured")

        context = context or ""
        chain = FallbackChain(
            task="qna",
            candidates=[
                Candidate(name="openrouter", invoke=lambda: self._openrouter_answer(question, context)),
                Candidate(name="gemini", invoke=lambda: self._gemini_answer(question, context)),
            ],
            unavailable_message="All Q&A services are currently unavailable.",
        )
        answer = await chain.run()
        return QnAResult(question=question, answer=answer, context=context)

    async def _openrouter_answer(self, question: str, context: str) -> str:
        chain = QA_PROMPT | self.llm | StrOutputParser()
        answer = await chain.ainvoke({"question": question, "context": context})
        if not answer.strip():
            raise ValueError("Empty answer from chat model")
        return answer

    async def _gemini_answer(self, question: str, context: str) -> str:
        prompt = f"""{QA_SYSTEM_PROMPT}

Question: {question}

Context (if any):
{context}

Respond only with JSON in the format: {{"answer": "..."}}"""
        reply = await self.gemini.generate_json(prompt)
        answer = reply.get("answer") if isinstance(reply, dict) else None
        if not isinstance(answer, str) or not answer.strip():
            raise ValueError("Gemini reply is missing 'answer'")
        return answer

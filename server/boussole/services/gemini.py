"""Gemini access through LangChain: one-shot generation and chat streaming."""

from typing import Any, AsyncIterator, Optional, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from ..config import AIConfig
from ..errors import ConfigurationError
from ..models import ChatTurn
from .prompts import CHAT_SYSTEM_INSTRUCTION


def get_llm(config: AIConfig) -> ChatGoogleGenerativeAI:
    """Get Gemini chat model for the given configuration."""
    return ChatGoogleGenerativeAI(
        model=config.model,
        google_api_key=config.api_key,
    )


def message_text(message: Any) -> str:
    """Extract plain text from a model message or streamed chunk."""
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type", "text") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return ""


class GenerativeClient:
    """Thin wrapper so generators depend on ``generate(prompt) -> text`` only."""

    def __init__(self, config: AIConfig, llm: Optional[Any] = None):
        self.config = config
        self._llm = llm

    @property
    def llm(self):
        if self._llm is None:
            self._llm = get_llm(self.config)
        return self._llm

    async def generate(self, prompt: str) -> str:
        response = await self.llm.ainvoke(prompt)
        return message_text(response)

    async def stream(self, messages: Sequence[BaseMessage]) -> AsyncIterator[str]:
        async for chunk in self.llm.astream(list(messages)):
            text = message_text(chunk)
            if text:
                yield text


class ChatStream:
    """Forward-only stream of reply chunks; it can be iterated once.

    Stop consuming (or call :meth:`aclose`) to cancel the underlying
    request.
    """

    def __init__(self, chunks: AsyncIterator[str]):
        self._chunks = chunks
        self._started = False

    def __aiter__(self) -> AsyncIterator[str]:
        if self._started:
            raise RuntimeError("chat stream already consumed")
        self._started = True
        return self._chunks

    async def aclose(self) -> None:
        self._started = True
        await self._chunks.aclose()


def build_chat_messages(history: Sequence[ChatTurn], message: str) -> list[BaseMessage]:
    """System instruction, replayed history, then the new user message."""
    messages: list[BaseMessage] = [SystemMessage(content=CHAT_SYSTEM_INSTRUCTION)]
    for turn in history:
        if turn.role == "user":
            messages.append(HumanMessage(content=turn.text))
        else:
            messages.append(AIMessage(content=turn.text))
    messages.append(HumanMessage(content=message))
    return messages


def open_chat_stream(
    config: AIConfig,
    history: Sequence[ChatTurn],
    message: str,
    client: Optional[GenerativeClient] = None,
) -> ChatStream:
    """Start a chat reply stream.

    Unlike the insight generators this does not degrade silently: a
    missing API key raises :class:`ConfigurationError` before anything is
    sent.
    """
    if not config.enabled:
        raise ConfigurationError("API Key missing")

    client = client or GenerativeClient(config)
    return ChatStream(client.stream(build_chat_messages(history, message)))

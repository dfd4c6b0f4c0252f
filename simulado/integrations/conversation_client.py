"""
Conversational help client.

A chat is scoped to one question. Sessions are kept in an explicit cache
keyed by question id: `get_or_open` returns the cached session for a
question or opens exactly one new remote conversation for it. When a
PersistedStore is given the cache survives between invocations.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from loguru import logger

from simulado.core.persisted_store import PersistedStore
from simulado.integrations.base import BaseApiClient

CHAT_SESSIONS_KEY = "simulado-chat-sessions"


@dataclass
class ChatMessage:
    role: str  # "user" | "assistant"
    content: str
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass
class ConversationSession:
    session_id: str
    conversation_id: str
    question_id: str
    user_id: str
    messages: list[ChatMessage] = field(default_factory=list)
    is_active: bool = True

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConversationSession:
        values = dict(data)
        values["messages"] = [ChatMessage(**m) for m in data.get("messages", [])]
        return cls(**values)


class ConversationClient(BaseApiClient):
    """HTTP client for /conversation with a per-question session cache."""

    def __init__(
        self,
        base_url: str,
        user_id: str | None = None,
        store: PersistedStore | None = None,
        **kwargs: Any,
    ):
        super().__init__(base_url, **kwargs)
        self.user_id = user_id or str(uuid.uuid4())
        self.store = store
        self._sessions: dict[str, ConversationSession] = {}
        if store is not None:
            for question_id, raw in (store.get(CHAT_SESSIONS_KEY) or {}).items():
                self._sessions[question_id] = ConversationSession.from_dict(raw)

    def _save(self) -> None:
        if self.store is not None:
            self.store.set(
                CHAT_SESSIONS_KEY, {qid: s.to_dict() for qid, s in self._sessions.items()}
            )

    # =========================================================================
    # Session cache
    # =========================================================================

    def session_for(self, question_id: str) -> ConversationSession | None:
        session = self._sessions.get(question_id)
        return session if session and session.is_active else None

    async def get_or_open(self, question_id: str) -> ConversationSession:
        """Reuse the active session for this question, or open a new one."""
        session = self.session_for(question_id)
        if session is not None:
            return session
        return await self.open_conversation(question_id)

    def close_session(self, question_id: str) -> None:
        session = self._sessions.get(question_id)
        if session:
            session.is_active = False
            self._save()

    def delete_session(self, question_id: str) -> None:
        if self._sessions.pop(question_id, None) is not None:
            self._save()

    # =========================================================================
    # Conversation API
    # =========================================================================

    async def open_conversation(self, question_id: str) -> ConversationSession:
        """Open a remote conversation; the assistant's greeting is the first message."""
        response = await self._request(
            "POST",
            "/open",
            "start conversation with AI assistant",
            json={
                "question_id": question_id,
                "user_id": self.user_id,
                "structured_output": False,
            },
        )
        session = self._parse(
            response,
            "start conversation with AI assistant",
            lambda data: ConversationSession(
                session_id=data["session_id"],
                conversation_id=data.get("conversation_id", ""),
                question_id=question_id,
                user_id=self.user_id,
                messages=[
                    ChatMessage(
                        role="assistant",
                        content=data.get("agent_response", ""),
                        timestamp=data.get("created_at") or datetime.now().isoformat(),
                    )
                ],
            ),
        )
        self._sessions[question_id] = session
        self._save()
        logger.info(f"Opened conversation {session.session_id} for question {question_id}")
        return session

    async def send_message(self, question_id: str, message: str) -> ChatMessage:
        """
        Send a message in the question's conversation, opening one if needed.

        The user message stays in the history even when the request fails,
        so it can be retried.
        """
        session = await self.get_or_open(question_id)
        session.messages.append(ChatMessage(role="user", content=message))
        self._save()

        response = await self._request(
            "POST",
            "/message",
            "send message to AI assistant",
            json={
                "session_id": session.session_id,
                "user_id": self.user_id,
                "message": message,
                "structured_output": False,
            },
        )
        reply = self._parse(
            response,
            "send message to AI assistant",
            lambda data: ChatMessage(
                role="assistant",
                content=data.get("agent_response", ""),
                timestamp=data.get("timestamp") or datetime.now().isoformat(),
            ),
        )
        session.messages.append(reply)
        self._save()
        return reply

"""
Session storage for pending category selections.

Holds at most one PendingSession per conversation identifier. The controller
only talks to the SessionStore interface, so the in-memory store can be
replaced by a shared one without changing the conversation flow.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Hashable, Optional

from .content_extractor import ExtractedContent


@dataclass(frozen=True)
class PendingSession:
    """An extraction result waiting for the user to pick a category."""
    extracted: ExtractedContent
    url: str


class SessionStore(ABC):
    """Key-value store mapping conversation identifiers to pending sessions."""

    @abstractmethod
    def get(self, chat_id: Hashable) -> Optional[PendingSession]:
        raise NotImplementedError

    @abstractmethod
    def set(self, chat_id: Hashable, session: PendingSession) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, chat_id: Hashable) -> bool:
        """Remove the session; returns True if one existed."""
        raise NotImplementedError

    def has(self, chat_id: Hashable) -> bool:
        return self.get(chat_id) is not None


class InMemorySessionStore(SessionStore):
    """Process-local session store."""

    def __init__(self) -> None:
        self._sessions: Dict[Hashable, PendingSession] = {}

    def get(self, chat_id: Hashable) -> Optional[PendingSession]:
        return self._sessions.get(chat_id)

    def set(self, chat_id: Hashable, session: PendingSession) -> None:
        self._sessions[chat_id] = session

    def delete(self, chat_id: Hashable) -> bool:
        return self._sessions.pop(chat_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)

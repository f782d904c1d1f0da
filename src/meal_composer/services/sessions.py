"""Storage for composition sessions served over HTTP."""

from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID, uuid4

from meal_composer.services.composition import CompositionSession


class UnknownSessionError(LookupError):
    """Raised when a session id is not known to the store."""


class SessionStore(Protocol):
    """Holds composition sessions by id."""

    def create(self, session: CompositionSession | None = None) -> UUID:
        """Store a session and return its id."""

    def get(self, session_id: UUID) -> CompositionSession:
        """Return a session or raise ``UnknownSessionError``."""

    def discard(self, session_id: UUID) -> None:
        """Forget a session."""


@dataclass
class InMemorySessionStore(SessionStore):
    """Process-local session store; each session has a single owner."""

    sessions: dict[UUID, CompositionSession] = field(default_factory=dict)

    def create(self, session: CompositionSession | None = None) -> UUID:
        """Store a session (a new empty one by default) and return its id."""
        session_id = uuid4()
        self.sessions[session_id] = session or CompositionSession()
        return session_id

    def get(self, session_id: UUID) -> CompositionSession:
        """Return a stored session."""
        session = self.sessions.get(session_id)
        if session is None:
            raise UnknownSessionError(str(session_id))
        return session

    def discard(self, session_id: UUID) -> None:
        """Forget a session if present."""
        self.sessions.pop(session_id, None)

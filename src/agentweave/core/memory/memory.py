"""Conversation memory — session-keyed, append-only text logs.

:class:`Memory` defines the protocol the generation loop consumes.
:class:`InMemoryMemory` provides a dict-based implementation suitable for
tests and single-process deployments.
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

_DEFAULT_SESSION = "__default__"


@runtime_checkable
class Memory(Protocol):
    """Append-only, ordered text fragments per session."""

    def add(self, text: str, session_id: str | None = None) -> None:
        """Append *text* to the session's log."""
        ...

    def history(self, session_id: str | None = None) -> str:
        """Return the session's log joined in append order."""
        ...


class InMemoryMemory:
    """Dict-backed :class:`Memory` implementation.

    Each session key owns its own list; a lock serialises appends so that a
    reader always observes every prior append for its key.
    """

    def __init__(self, separator: str = "\n") -> None:
        self._separator = separator
        self._sessions: dict[str, list[str]] = {}
        self._lock = threading.Lock()

    def add(self, text: str, session_id: str | None = None) -> None:
        with self._lock:
            self._sessions.setdefault(session_id or _DEFAULT_SESSION, []).append(text)

    def history(self, session_id: str | None = None) -> str:
        return self._separator.join(self.entries(session_id))

    def entries(self, session_id: str | None = None) -> list[str]:
        """Return a copy of the session's fragments."""
        with self._lock:
            return list(self._sessions.get(session_id or _DEFAULT_SESSION, []))

    def reset(self, session_id: str | None = None) -> None:
        """Forget one session's log."""
        with self._lock:
            self._sessions.pop(session_id or _DEFAULT_SESSION, None)

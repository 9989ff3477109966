"""
Session capability consumed by the subscribe page.

The page never touches flask_login directly; it is handed a SessionProvider
so tests can swap in authenticated/anonymous sessions without a request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Protocol

SessionListener = Callable[["Session"], None]


@dataclass(frozen=True)
class Session:
    is_authenticated: bool
    user: Any = None


ANONYMOUS = Session(is_authenticated=False)


class SessionProvider(Protocol):
    def current(self) -> Session: ...

    def subscribe(self, callback: SessionListener) -> Callable[[], None]: ...


class StaticSessionProvider:
    """Holds a session in memory and notifies observers when it is replaced."""

    def __init__(self, session: Session = ANONYMOUS):
        self._session = session
        self._listeners: List[SessionListener] = []

    def current(self) -> Session:
        return self._session

    def set(self, session: Session) -> None:
        if session == self._session:
            return
        self._session = session
        for cb in list(self._listeners):
            cb(session)

    def subscribe(self, callback: SessionListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _unsubscribe


class FlaskLoginSessionProvider:
    """
    Session backed by flask_login.current_user.

    A request never sees its login state change mid-flight, so subscribe()
    registers nothing.
    """

    def __init__(self, user: Optional[Any] = None):
        self._user = user

    def current(self) -> Session:
        from flask_login import current_user  # lazy: keeps module importable outside Flask

        u = self._user if self._user is not None else current_user
        authed = bool(getattr(u, "is_authenticated", False))
        return Session(is_authenticated=authed, user=u if authed else None)

    def subscribe(self, callback: SessionListener) -> Callable[[], None]:
        return lambda: None

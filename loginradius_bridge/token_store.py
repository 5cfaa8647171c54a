"""
Where the current access token lives between requests.

The browser keeps one token string and one remember-me flag under fixed keys;
the server keeps the token for the duration of one request only. Both sides
see the same small capability, so the refresh coordinator and the widgets can
be handed either one (or an in-memory store in tests).

Writes are last-write-wins. Two refreshes racing for the same expired token
may both succeed; whichever stores its token last is authoritative.
"""

from abc import ABC, abstractmethod
from threading import Lock
from typing import Any, Dict, Optional

from flask import g

TOKEN_KEY = 'LRTokenKey'
REMEMBER_ME_KEY = 'lr-rememberme'


class TokenStore(ABC):
    """Get/set access to the persisted access token and remember-me flag."""

    @abstractmethod
    def _read(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def _write(self, key: str, value: Optional[str]) -> None:
        ...

    def get_token(self) -> Optional[str]:
        """The stored access token, if any."""
        return self._read(TOKEN_KEY) or None

    def set_token(self, token: Optional[str]) -> None:
        """Replace the stored access token."""
        self._write(TOKEN_KEY, token)

    def get_remember_me(self) -> bool:
        """The customer's remember-me choice."""
        return self._read(REMEMBER_ME_KEY) == 'true'

    def set_remember_me(self, remember_me: bool) -> None:
        """Record the customer's remember-me choice."""
        self._write(REMEMBER_ME_KEY, 'true' if remember_me else 'false')


class InMemoryTokenStore(TokenStore):
    """Token store backed by a dict; stands in for browser local storage."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, Any] = dict(initial or {})
        self._lock = Lock()

    def _read(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def _write(self, key: str, value: Optional[str]) -> None:
        with self._lock:
            if value is None:
                self._data.pop(key, None)
            else:
                self._data[key] = value


class RequestTokenStore(TokenStore):
    """Token store that lives as long as the current request context."""

    def _values(self) -> Dict[str, str]:
        values: Dict[str, str] = g.setdefault('loginradius_tokens', {})
        return values

    def _read(self, key: str) -> Optional[str]:
        return self._values().get(key)

    def _write(self, key: str, value: Optional[str]) -> None:
        if value is None:
            self._values().pop(key, None)
        else:
            self._values()[key] = value

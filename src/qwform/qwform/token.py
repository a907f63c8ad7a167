"""Anti-double-submit tokens issued per action."""

from __future__ import annotations

import logging
import secrets
import threading
from typing import Protocol

log = logging.getLogger(__name__)

NO_TOKEN = "none"


class TokenIssuer(Protocol):
    def token_for(self, action: str) -> str:
        """Token pre-issued for the action, or NO_TOKEN."""
        ...


class DoubleSubmitTokens:
    """Session-scoped token map keyed by action identity.

    `save_token` is called by the action before rendering the form,
    `verify` when the form comes back; a verified token is consumed.
    """

    def __init__(self):
        self._tokens: dict[str, str] = {}
        self._lock = threading.Lock()

    def save_token(self, action: str) -> str:
        token = secrets.token_hex(16)
        with self._lock:
            self._tokens[action] = token
        log.debug(f"Saved token for {action}")
        return token

    def token_for(self, action: str) -> str:
        with self._lock:
            return self._tokens.get(action, NO_TOKEN)

    def verify(self, action: str, token: str | None) -> bool:
        with self._lock:
            expected = self._tokens.get(action)
            if expected is None or token is None:
                return False
            if not secrets.compare_digest(expected, token):
                return False
            del self._tokens[action]
            return True

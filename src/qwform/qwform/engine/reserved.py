"""Reserved names and the guard that protects them.

The engine injects a fixed set of names into every render context. Form fields
and explicitly registered data must not shadow them, nor each other.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Iterable, Mapping

from qwform.exceptions import DataConflictError, ReservedWordConflictError

log = logging.getLogger(__name__)

ERRORS_NAME = "errors"
MESSAGES_NAME = "messages"
CLASSIFICATION_NAME = "cls"
VERSION_QUERY_NAME = "vq"
HANDY_NAME = "handy"

BASE_RESERVED_NAMES = frozenset(
    {ERRORS_NAME, MESSAGES_NAME, CLASSIFICATION_NAME, VERSION_QUERY_NAME, HANDY_NAME}
)

ReservedNamesHook = Callable[[], Iterable[str]]


class ReservedNameSet:
    """Process-wide reserved names, populated once and read-only afterwards.

    Extension names come from a hook that runs on first access. Concurrent
    first accesses are serialized with double-checked locking so the hook runs
    exactly once.
    """

    def __init__(self, hook: ReservedNamesHook | None = None):
        self._hook = hook
        self._names: frozenset[str] | None = None
        self._lock = threading.Lock()

    def initialize(self, hook: ReservedNamesHook | None) -> None:
        """Install the extension hook; must happen before the first lookup."""
        with self._lock:
            if self._names is not None:
                raise RuntimeError("Reserved names are already initialized")
            self._hook = hook

    def names(self) -> frozenset[str]:
        names = self._names
        if names is not None:
            return names
        with self._lock:
            if self._names is None:
                extra = frozenset(self._hook()) if self._hook else frozenset()
                self._names = BASE_RESERVED_NAMES | extra
                log.debug(f"Reserved names initialized: {sorted(self._names)}")
            return self._names

    def __contains__(self, name: object) -> bool:
        return name in self.names()


_default_reserved = ReservedNameSet()


def default_reserved_names() -> ReservedNameSet:
    """The process-wide reserved name set."""
    return _default_reserved


class ReservedWordGuard:
    """Checks candidate names against reserved names and already-written names.

    Bound to one render's variable mapping; nothing is memoized between calls.
    """

    def __init__(
        self,
        variables: Mapping[str, Any],
        reserved: ReservedNameSet | None = None,
    ):
        self.variables = variables
        self.reserved = reserved or default_reserved_names()

    def check_registered_data(self, name: str) -> None:
        """Check a name registered explicitly as data."""
        self._check(
            name,
            f"Rename the registered data '{name}', e.g. '{name}Data'.",
            "Rename the registered data or the form field so they differ.",
        )

    def check_form_property(self, name: str) -> None:
        """Check a form field name before it is exported to the template."""
        self._check(
            name,
            f"Rename the form field '{name}', the name is used by the engine.",
            "Rename the form field or the registered data so they differ.",
        )

    def check_property_reference(self, name: str) -> None:
        """Reject a bound property whose root is an engine-injected name."""
        if name in self.reserved:
            raise ReservedWordConflictError(
                name,
                self.variables,
                f"The property '{name}' would bind to the engine's own variable.",
            )

    def _check(self, name: str, reserved_advice: str, conflict_advice: str) -> None:
        if name in self.reserved:
            raise ReservedWordConflictError(name, self.variables, reserved_advice)
        if name in self.variables:
            raise DataConflictError(name, self.variables, conflict_advice)

"""Attribute directive dispatcher.

Per element: Idle -> Matched -> Rewritten. Every registered directive present
on the element runs in descending precedence; each handler writes into one
shared RewriteResult which is merged back onto the element afterwards.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable

from qwform.config import QwformConfig
from qwform.directives import DirectiveHandler, builtin_handlers
from qwform.engine.classification import ClassificationExpander
from qwform.engine.rewrite import (
    DirectiveContext,
    RenderScope,
    RewriteResult,
    RewriteState,
)
from qwform.host.element import Element
from qwform.token import TokenIssuer

log = logging.getLogger(__name__)


class DirectiveRegistry:
    """Directive handlers, compiled once into precedence order.

    Registration is open until the first lookup; the compiled order is then
    read-only and shared between threads without locking.
    """

    def __init__(self, handlers: Iterable[DirectiveHandler] = ()):
        self._handlers: list[DirectiveHandler] = []
        self._ordered: tuple[DirectiveHandler, ...] | None = None
        self._lock = threading.Lock()
        for handler in handlers:
            self.register(handler)

    def register(self, handler: DirectiveHandler) -> None:
        with self._lock:
            if self._ordered is not None:
                raise RuntimeError(
                    f"Cannot register '{handler.name}', the registry is already compiled"
                )
            if any(h.name.lower() == handler.name.lower() for h in self._handlers):
                raise ValueError(f"Directive already registered: {handler.name}")
            self._handlers.append(handler)

    def ordered(self) -> tuple[DirectiveHandler, ...]:
        ordered = self._ordered
        if ordered is not None:
            return ordered
        with self._lock:
            if self._ordered is None:
                # sorted() is stable: equal precedence keeps registration order
                self._ordered = tuple(
                    sorted(self._handlers, key=lambda h: -h.precedence)
                )
                log.debug(
                    "Directive order: "
                    + ", ".join(f"{h.name}({h.precedence})" for h in self._ordered)
                )
            return self._ordered

    def get(self, name: str) -> DirectiveHandler | None:
        for handler in self.ordered():
            if handler.name.lower() == name.lower():
                return handler
        return None

    def __iter__(self):
        return iter(self.ordered())


_default_registry: DirectiveRegistry | None = None
_default_registry_lock = threading.Lock()


def default_registry() -> DirectiveRegistry:
    """Process-wide registry with the built-in directives."""
    global _default_registry
    if _default_registry is not None:
        return _default_registry
    with _default_registry_lock:
        if _default_registry is None:
            registry = DirectiveRegistry(builtin_handlers())
            registry.ordered()
            _default_registry = registry
        return _default_registry


class Dispatcher:
    """Runs the registered directive handlers over one element at a time."""

    def __init__(
        self,
        config: QwformConfig | None = None,
        registry: DirectiveRegistry | None = None,
        expander: ClassificationExpander | None = None,
        tokens: TokenIssuer | None = None,
    ):
        self.config = config or QwformConfig()
        self.registry = registry or default_registry()
        self.expander = expander
        self.tokens = tokens

    def matching(self, element: Element) -> list[tuple[DirectiveHandler, str]]:
        """Handlers whose attribute is present, in processing order."""
        found = []
        for handler in self.registry.ordered():
            attribute = self.config.dialect_attr(handler.name)
            if element.has(attribute):
                found.append((handler, attribute))
        return found

    def process(self, element: Element, scope: RenderScope) -> RewriteResult:
        """Rewrite one element in place.

        Args:
            element: The element about to be evaluated by the host
            scope: Per-render state (iteration stack, guard, open elements)

        Returns:
            What was generated; the host honours remove_element, iteration
            and select_binding
        """
        result = RewriteResult()
        matches = self.matching(element)
        if not matches:
            return result

        result.state = RewriteState.MATCHED
        # handlers read a snapshot; the element changes only on apply()
        snapshot = Element(element.tag, dict(element.attrs))
        for handler, attribute in matches:
            log.debug(f"<{element.tag}> {attribute}={snapshot.get(attribute)!r}")
            ctx = DirectiveContext(
                snapshot,
                attribute,
                scope,
                self.config,
                result,
                expander=self.expander,
                tokens=self.tokens,
            )
            handler.handle(ctx)
            result.matched.append(handler.name)
            if handler.directive.remove_original:
                result.removed.append(attribute)
            if result.remove_element:
                break

        if not result.remove_element:
            result.apply(element)
        result.state = RewriteState.REWRITTEN
        return result

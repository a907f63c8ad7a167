"""Base class for rewrite directive handlers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from qwform.engine.rewrite import AttributeDirective, DirectiveContext
from qwform.engine.segment import strip_expression
from qwform.exceptions import MalformedDirectiveError


class DirectiveHandler(ABC):
    """One rewrite directive: its registration record and its rewrite rule."""

    directive: AttributeDirective

    @property
    def name(self) -> str:
        return self.directive.name

    @property
    def precedence(self) -> int:
        return self.directive.precedence

    @abstractmethod
    def handle(self, ctx: DirectiveContext) -> None:
        """Rewrite the element seen through `ctx` into ctx.result."""
        ...

    def require_value(self, ctx: DirectiveContext) -> str:
        """The directive value without a `${...}` wrapper; empty is malformed."""
        value = strip_expression(ctx.value)
        if not value:
            raise MalformedDirectiveError(ctx.attribute, ctx.value, "the value is empty")
        return value

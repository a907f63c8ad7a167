"""Rewrite IR - what directive handlers read and what they produce.

A handler sees one element through a DirectiveContext and records its output
in a RewriteResult. The result is merged back onto the element by the
dispatcher, then the host engine evaluates the generated directives as if the
template author had written them.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from qwform.engine.iteration import IterationStack
from qwform.engine.reserved import ReservedWordGuard
from qwform.host.element import Element

if TYPE_CHECKING:
    from qwform.config import QwformConfig
    from qwform.engine.classification import ClassificationExpander
    from qwform.token import TokenIssuer

_VARIABLE_PATH = re.compile(r"^[A-Za-z_]\w*(\.[A-Za-z_]\w*)*$")


def literal(value: str) -> str:
    """Quote a string as an expression literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def trailing_property(expression: str) -> str | None:
    """Last segment of a plain variable path (`form.items` -> `items`), else None."""
    expression = expression.strip()
    if not _VARIABLE_PATH.match(expression):
        return None
    return expression.rsplit(".", 1)[-1]


@dataclass(frozen=True)
class AttributeDirective:
    """Static registration record of a rewrite directive."""

    name: str
    precedence: int
    remove_original: bool = True


@dataclass(frozen=True)
class SelectBinding:
    """Property bound on a `select`, consumed by nested `optionCls` handlers."""

    property_name: str
    field_name: str
    multiple: bool


@dataclass(frozen=True)
class IterationRequest:
    """Repeat request for the host; each item pushes one iteration frame."""

    iter_var_name: str
    status_var_name: str
    iterable: str
    segment: Optional[str] = None


@dataclass
class OpenElement:
    """Entry of the host's open-element stack."""

    element: Element
    binding: Optional[SelectBinding] = None


@dataclass
class RenderScope:
    """Per-render state handed to every handler invocation."""

    stack: IterationStack
    guard: ReservedWordGuard
    ancestors: list[OpenElement] = field(default_factory=list)
    template_path: Optional[str] = None
    action: Optional[str] = None


class RewriteState(enum.Enum):
    IDLE = "idle"
    MATCHED = "matched"
    REWRITTEN = "rewritten"


@dataclass
class RewriteResult:
    """Everything the handlers requested for one element."""

    state: RewriteState = RewriteState.IDLE
    matched: list[str] = field(default_factory=list)
    directives: dict[str, str] = field(default_factory=dict)
    attributes: dict[str, str] = field(default_factory=dict)
    removed: list[str] = field(default_factory=list)
    remove_element: bool = False
    reevaluate: bool = False
    iteration: Optional[IterationRequest] = None
    select_binding: Optional[SelectBinding] = None

    def apply(self, element: Element) -> None:
        """Merge the result onto the element in place."""
        for name in self.removed:
            element.remove(name)
        for name, value in self.attributes.items():
            element.set(name, value)
        for name, value in self.directives.items():
            element.set(name, value)


class DirectiveContext:
    """View of one element handed to a single handler invocation."""

    def __init__(
        self,
        element: Element,
        attribute: str,
        scope: RenderScope,
        config: "QwformConfig",
        result: RewriteResult,
        expander: "ClassificationExpander | None" = None,
        tokens: "TokenIssuer | None" = None,
    ):
        self.element = element
        self.attribute = attribute
        self.value = element.get(attribute) or ""
        self.scope = scope
        self.config = config
        self.result = result
        self.expander = expander
        self.tokens = tokens

    @property
    def tag(self) -> str:
        return self.element.tag

    @property
    def stack(self) -> IterationStack:
        return self.scope.stack

    @property
    def guard(self) -> ReservedWordGuard:
        return self.scope.guard

    @property
    def directive_text(self) -> str:
        return f'{self.attribute}="{self.value}"'

    def has_explicit(self, name: str) -> bool:
        """Whether the host directive is already present, written or generated."""
        key = self.config.host_attr(name)
        return self.element.has(key) or key in self.result.directives

    def emit(self, name: str, expression: str) -> bool:
        """Write one host directive unless it already exists; explicit wins."""
        if self.has_explicit(name):
            return False
        self.result.directives[self.config.host_attr(name)] = expression
        return True

    def set_attribute(self, name: str, value: str) -> None:
        self.result.attributes[name.lower()] = value

    def nearest_select_binding(self) -> SelectBinding | None:
        """Binding of the nearest enclosing `select`, by walking open elements."""
        for entry in reversed(self.scope.ancestors):
            if entry.binding is not None:
                return entry.binding
            if entry.element.tag == "select":
                return None
        return None

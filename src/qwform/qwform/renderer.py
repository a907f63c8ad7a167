"""Renderer - the host engine that evaluates host directives.

The tree is walked once. At each element the Dispatcher rewrites dialect
directives (la:*) into host directives (th:*), then the host directives are
evaluated here with Jinja2 expressions:

    th:each="item, itemStat : items"    repeat the element
    th:if / th:unless                   keep or drop the element
    th:text / th:utext                  replace the content (escaped / raw)
    th:selected / th:checked            boolean attributes
    th:classappend                      append to class
    th:attrappend="class=(expr)"        append to any attribute
    th:<attr>                           set <attr> to the value
"""

from __future__ import annotations

import logging
from collections import ChainMap
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Optional

from jinja2 import Environment, StrictUndefined
from jinja2.exceptions import TemplateSyntaxError, UndefinedError

from qwform.config import QwformConfig
from qwform.context import RenderContext
from qwform.engine.dispatcher import Dispatcher
from qwform.engine.iteration import IterationStack
from qwform.engine.rewrite import IterationRequest, OpenElement, RenderScope
from qwform.engine.segment import find_top_level, parse_iteration_spec
from qwform.exceptions import (
    MalformedDirectiveError,
    TemplateNotFoundError,
    UnresolvedExpressionError,
)
from qwform.host.element import Element, Node, Raw, serialize
from qwform.host.parser import parse_html

log = logging.getLogger(__name__)

BOOLEAN_ATTRIBUTES = ("selected", "checked", "disabled", "readonly")
EXPRESSION_CACHE_SIZE = 256


@dataclass
class IterationStatus:
    """Status variable bound next to each iterated item (e.g. `itemStat`)."""

    index: int
    size: int
    current: Any
    property_path: Optional[str] = None

    @property
    def count(self) -> int:
        return self.index + 1

    @property
    def first(self) -> bool:
        return self.index == 0

    @property
    def last(self) -> bool:
        return self.index == self.size - 1

    @property
    def even(self) -> bool:
        return self.count % 2 == 0

    @property
    def odd(self) -> bool:
        return not self.even


class TemplateEngine:
    """Parses, rewrites and renders templates.

    Usage:
        engine = TemplateEngine(config, dispatcher)
        html = engine.render("member/edit.html", ctx, action="MemberEditAction")
    """

    def __init__(
        self,
        config: QwformConfig | None = None,
        dispatcher: Dispatcher | None = None,
    ):
        self.config = config or QwformConfig()
        self.dispatcher = dispatcher or Dispatcher(self.config)
        self.env = Environment(undefined=StrictUndefined, autoescape=False)
        self._compile = lru_cache(maxsize=EXPRESSION_CACHE_SIZE)(self._compile_expression)

    # =========================================================================
    # Entry points
    # =========================================================================

    def render(
        self,
        path: str,
        context: RenderContext | Mapping[str, Any] | None = None,
        action: str | None = None,
    ) -> str:
        """Render a template file relative to templates_dir.

        Unresolved expressions are routed to the fallback error view when one
        is configured.
        """
        try:
            return self.render_source(self.load(path), context, path, action)
        except UnresolvedExpressionError as e:
            fallback = self.config.fallback_error_view
            if fallback is None or fallback == path:
                raise
            log.error(f"Rendering {path} failed, routing to {fallback}: {e.cause}")
            error_context = RenderContext().register_data("error", e)
            return self.render_source(self.load(fallback), error_context, fallback, action)

    def render_source(
        self,
        source: str,
        context: RenderContext | Mapping[str, Any] | None = None,
        template_path: str = "<string>",
        action: str | None = None,
    ) -> str:
        document = parse_html(source)
        render_context = self._as_render_context(context)
        scope = RenderScope(
            stack=IterationStack(),
            guard=render_context.guard,
            template_path=template_path,
            action=action,
        )
        rendering = _Rendering(self, scope, ChainMap(dict(render_context.variables)))
        document.children = rendering.render_nodes(document.children)
        return serialize(document)

    def load(self, path: str) -> str:
        p = Path(path)
        if not p.is_absolute():
            p = Path(self.config.templates_dir or ".") / p
        if not p.is_file():
            raise TemplateNotFoundError(str(p))
        return p.read_text()

    # =========================================================================
    # Expressions
    # =========================================================================

    def evaluate(
        self,
        expression: str,
        variables: Mapping[str, Any],
        template_path: str | None = None,
        attribute: str | None = None,
    ) -> Any:
        """Evaluate one host expression, wrapping host failures."""
        try:
            value = self._compile(expression)(**dict(variables))
            if isinstance(value, StrictUndefined):
                # force the undefined error for bare undefined names
                str(value)
            return value
        except (UndefinedError, TemplateSyntaxError) as e:
            raise UnresolvedExpressionError(
                expression, template_path, attribute, str(e)
            ) from e

    def _compile_expression(self, expression: str) -> Callable[..., Any]:
        return self.env.compile_expression(expression, undefined_to_none=False)

    def _as_render_context(
        self, context: RenderContext | Mapping[str, Any] | None
    ) -> RenderContext:
        if isinstance(context, RenderContext):
            return context
        render_context = RenderContext()
        for name, value in (context or {}).items():
            render_context.register_data(name, value)
        return render_context


class _Rendering:
    """State of one render: iteration stack, open elements and variable scopes."""

    def __init__(self, engine: TemplateEngine, scope: RenderScope, variables: ChainMap):
        self.engine = engine
        self.config = engine.config
        self.scope = scope
        self.variables = variables

    def render_nodes(self, nodes: list[Node]) -> list[Node]:
        out: list[Node] = []
        for node in nodes:
            if isinstance(node, Element):
                out.extend(self.render_element(node.clone()))
            else:
                out.append(node)
        return out

    def render_element(self, element: Element) -> list[Node]:
        foreach_attr = self.config.dialect_attr("foreach")
        # directives sharing the element with foreach run again inside each frame
        pristine = element.clone() if element.has(foreach_attr) else None
        result = self.engine.dispatcher.process(element, self.scope)
        if result.remove_element:
            return []
        if result.iteration is not None and pristine is not None:
            pristine.remove(foreach_attr)
            return self._foreach(pristine, result.iteration)

        each_attr = self.config.host_attr("each")
        if element.has(each_attr):
            return self._each(element, element.get(each_attr) or "", result.select_binding)
        return self._finish(element, result.select_binding)

    # -------------------------------------------------------------------------
    # Iteration
    # -------------------------------------------------------------------------

    def _foreach(self, element: Element, request: IterationRequest) -> list[Node]:
        attribute = self.config.dialect_attr("foreach")
        items = self._items(request.iterable, attribute)
        out: list[Node] = []
        for index, item in enumerate(items):
            with self.scope.stack.frame(
                request.iter_var_name, request.status_var_name, index, request.segment
            ) as frame:
                status = IterationStatus(index, len(items), item, frame.path_prefix)
                out.extend(
                    self._with_vars(
                        {request.iter_var_name: item, request.status_var_name: status},
                        lambda: self.render_element(element.clone()),
                    )
                )
        return out

    def _each(self, element: Element, value: str, binding) -> list[Node]:
        attribute = self.config.host_attr("each")
        element.remove(attribute)
        if find_top_level(value, ":") < 0:
            raise MalformedDirectiveError(attribute, value, "expected 'var : iterable'")
        spec = parse_iteration_spec(value, attribute=attribute)
        items = self._items(spec.reference, attribute)
        out: list[Node] = []
        for index, item in enumerate(items):
            status = IterationStatus(index, len(items), item)
            clone = element.clone()
            out.extend(
                self._with_vars(
                    {spec.iter_var_name: item, spec.status_var_name: status},
                    lambda: self._finish(clone, binding),
                )
            )
        return out

    def _items(self, expression: str, attribute: str) -> list[Any]:
        value = self._eval(expression, attribute)
        if value is None:
            return []
        if isinstance(value, Mapping):
            return list(value.items())
        return list(value)

    def _with_vars(self, bound: dict[str, Any], render: Callable[[], list[Node]]) -> list[Node]:
        saved = self.variables
        self.variables = saved.new_child(bound)
        try:
            return render()
        finally:
            self.variables = saved

    # -------------------------------------------------------------------------
    # Host directives
    # -------------------------------------------------------------------------

    def _finish(self, element: Element, binding) -> list[Node]:
        if not self._conditions_hold(element):
            return []

        prefix = f"{self.config.host_prefix}:"
        text: tuple[str, str] | None = None
        for name in [n for n in element.attrs if n.startswith(prefix)]:
            expression = element.get(name) or ""
            element.remove(name)
            directive = name[len(prefix):]
            if directive in ("text", "utext"):
                text = (directive, expression)
            elif directive == "classappend":
                self._append(element, "class", self._eval(expression, name), " ")
            elif directive == "attrappend":
                self._attrappend(element, expression, name)
            elif directive in BOOLEAN_ATTRIBUTES:
                if self._eval(expression, name):
                    element.set(directive, directive)
                else:
                    element.remove(directive)
            else:
                value = self._eval(expression, name)
                if value is None:
                    element.remove(directive)
                else:
                    element.set(directive, str(value))

        if text is not None:
            directive, expression = text
            value = self._eval(expression, self.config.host_attr(directive))
            value = "" if value is None else str(value)
            element.children = [value if directive == "text" else Raw(value)]
            return [element]

        self.scope.ancestors.append(OpenElement(element, binding))
        try:
            element.children = self.render_nodes(element.children)
        finally:
            self.scope.ancestors.pop()
        return [element]

    def _conditions_hold(self, element: Element) -> bool:
        if_attr = self.config.host_attr("if")
        unless_attr = self.config.host_attr("unless")
        if element.has(if_attr):
            expression = element.get(if_attr) or ""
            element.remove(if_attr)
            if not self._eval(expression, if_attr):
                return False
        if element.has(unless_attr):
            expression = element.get(unless_attr) or ""
            element.remove(unless_attr)
            if self._eval(expression, unless_attr):
                return False
        return True

    def _attrappend(self, element: Element, value: str, attribute: str) -> None:
        rest = value
        while rest.strip():
            comma = find_top_level(rest, ",")
            part, rest = (rest, "") if comma < 0 else (rest[:comma], rest[comma + 1 :])
            target, eq, expression = part.partition("=")
            if not eq or not target.strip():
                raise MalformedDirectiveError(attribute, value, "expected 'attr=(expr)'")
            expression = expression.strip()
            if expression.startswith("(") and expression.endswith(")"):
                expression = expression[1:-1]
            self._append(element, target.strip(), self._eval(expression, attribute), "")

    @staticmethod
    def _append(element: Element, name: str, value: Any, separator: str) -> None:
        if value is None or value == "":
            return
        current = element.get(name)
        if current:
            element.set(name, f"{current}{separator}{value}")
        else:
            element.set(name, str(value).strip())

    def _eval(self, expression: str, attribute: str) -> Any:
        return self.engine.evaluate(
            expression,
            self.variables,
            self.scope.template_path,
            f'{attribute}="{expression}"',
        )

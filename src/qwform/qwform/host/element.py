"""Element tree used by the host engine.

Attribute names are normalized to lower case on every access, the same way
HTML parsers report them, so `la:optionCls` and `la:optioncls` are the same
attribute.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Iterator, Union

from markupsafe import escape

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)

RAW_TEXT_ELEMENTS = frozenset({"script", "style"})

DOCUMENT = "#document"


@dataclass
class Raw:
    """Markup emitted verbatim (comments, doctype, processing instructions)."""

    value: str


Node = Union["Element", str, Raw]


@dataclass
class Element:
    """A single HTML element with ordered attributes and child nodes."""

    tag: str
    attrs: dict[str, str | None] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)

    def __post_init__(self):
        self.tag = self.tag.lower()
        self.attrs = {k.lower(): v for k, v in self.attrs.items()}

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.attrs.get(name.lower(), default)

    def has(self, name: str) -> bool:
        return name.lower() in self.attrs

    def set(self, name: str, value: str | None) -> None:
        self.attrs[name.lower()] = value

    def remove(self, name: str) -> None:
        self.attrs.pop(name.lower(), None)

    def append(self, node: Node) -> None:
        self.children.append(node)

    def clone(self) -> "Element":
        """Deep copy, used when the host repeats an element per item."""
        return copy.deepcopy(self)

    @property
    def is_void(self) -> bool:
        return self.tag in VOID_ELEMENTS

    def iter(self) -> Iterator["Element"]:
        """Yield this element and every descendant element, document order."""
        yield self
        for child in self.children:
            if isinstance(child, Element):
                yield from child.iter()

    def text_content(self) -> str:
        parts: list[str] = []
        for child in self.children:
            if isinstance(child, Element):
                parts.append(child.text_content())
            elif isinstance(child, str):
                parts.append(child)
        return "".join(parts)

    def __str__(self) -> str:
        return serialize(self)


def _render_attrs(attrs: dict[str, str | None]) -> str:
    out = []
    for name, value in attrs.items():
        if value is None:
            out.append(f" {name}")
        else:
            out.append(f' {name}="{escape(value)}"')
    return "".join(out)


def serialize(node: Node, raw_text: bool = False) -> str:
    """Serialize a node and its subtree back to HTML text."""
    if isinstance(node, Raw):
        return node.value
    if isinstance(node, str):
        return node if raw_text else str(escape(node))

    inner_raw = node.tag in RAW_TEXT_ELEMENTS
    body = "".join(serialize(child, inner_raw) for child in node.children)
    if node.tag == DOCUMENT:
        return body
    if node.is_void and not node.children:
        return f"<{node.tag}{_render_attrs(node.attrs)}/>"
    return f"<{node.tag}{_render_attrs(node.attrs)}>{body}</{node.tag}>"

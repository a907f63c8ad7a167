"""errors directive - renders validation messages for one field or all fields.

Usage:
    <ul><li la:errors="memberName"></li></ul>
    <ul><li la:errors="all"></li></ul>
"""

from __future__ import annotations

from qwform.directives.base import DirectiveHandler
from qwform.engine.resolver import resolve_property_path
from qwform.engine.rewrite import AttributeDirective, DirectiveContext, literal

ALL_FIELDS = "all"
MESSAGE_VAR = "er"


def merge_style(class_attr: str | None, style: str) -> str:
    """Add `style` to a class attribute value unless it is already there."""
    if not class_attr:
        return style
    if style in class_attr.split():
        return class_attr
    return f"{class_attr} {style}"


class ErrorsDirective(DirectiveHandler):
    directive = AttributeDirective("errors", precedence=950)

    def handle(self, ctx: DirectiveContext) -> None:
        target = self.require_value(ctx)

        ctx.set_attribute(
            "class", merge_style(ctx.element.get("class"), ctx.config.errors_style_class)
        )
        if target.lower() == ALL_FIELDS:
            messages = "errors.all_messages()"
        else:
            field_name = resolve_property_path(target, ctx.stack)
            messages = f"errors.messages_for({literal(field_name)})"
        ctx.emit("each", f"{MESSAGE_VAR} : {messages}")
        ctx.emit("text", f"{MESSAGE_VAR}.message")
        ctx.result.reevaluate = True

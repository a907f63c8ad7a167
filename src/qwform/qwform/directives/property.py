"""property directive - binds a form field's name, value and text.

Usage:
    <input type="text" la:property="memberName"/>

Result with memberName set to "Ariel":
    <input type="text" name="memberName" value="Ariel"/>

With a validation error on memberName:
    <input type="text" name="memberName" value="" class="validError"/>
"""

from __future__ import annotations

from qwform.directives.base import DirectiveHandler
from qwform.engine.resolver import resolve_property_path
from qwform.engine.rewrite import (
    AttributeDirective,
    DirectiveContext,
    SelectBinding,
    literal,
)

UNBOUND_VALUE_TYPES = ("checkbox", "radio")


class PropertyDirective(DirectiveHandler):
    directive = AttributeDirective("property", precedence=950)

    def handle(self, ctx: DirectiveContext) -> None:
        property_name = self.require_value(ctx)
        root = property_name.partition(".")[0]
        if ctx.stack.find_by_iter_var(root) is None:
            ctx.guard.check_property_reference(root)

        field_name = resolve_property_path(property_name, ctx.stack)

        if ctx.tag == "input":
            ctx.emit("name", literal(field_name))
            input_type = (ctx.element.get("type") or "").lower()
            if input_type not in UNBOUND_VALUE_TYPES:
                ctx.emit("value", property_name)
        elif ctx.tag == "select":
            ctx.emit("name", literal(field_name))
            multiple = ctx.element.get("multiple") == "multiple"
            ctx.result.select_binding = SelectBinding(property_name, field_name, multiple)
        elif ctx.tag == "textarea":
            ctx.emit("name", literal(field_name))
            ctx.emit("text", property_name)
        else:
            ctx.emit("text", property_name)

        self._append_error_style(ctx, field_name)

    def _append_error_style(self, ctx: DirectiveContext, field_name: str) -> None:
        style = ctx.config.error_style_class
        has_error = f"errors.has_error_for({literal(field_name)})"
        if not ctx.has_explicit("classappend"):
            ctx.emit("classappend", f"{literal(style)} if {has_error} else ''")
        elif not ctx.has_explicit("attrappend"):
            # keep the author's classappend, append through the class attribute
            ctx.emit("attrappend", f"class=({literal(' ' + style)} if {has_error} else '')")

"""token directive - hidden field carrying the anti-double-submit token.

Usage:
    <input type="hidden" la:token="true"/>

Only a hidden input is legal. `la:token="false"` drops the element.
"""

from __future__ import annotations

from qwform.directives.base import DirectiveHandler
from qwform.engine.rewrite import AttributeDirective, DirectiveContext, literal
from qwform.exceptions import MalformedDirectiveError, TokenPlacementError
from qwform.token import NO_TOKEN

_BOOLEANS = {"true": True, "false": False}


class TokenDirective(DirectiveHandler):
    directive = AttributeDirective("token", precedence=950)

    def handle(self, ctx: DirectiveContext) -> None:
        input_type = ctx.element.get("type")
        if ctx.tag != "input" or (input_type or "").lower() != "hidden":
            raise TokenPlacementError(ctx.tag, input_type, ctx.scope.template_path)

        value = self.require_value(ctx).lower()
        if value not in _BOOLEANS:
            raise MalformedDirectiveError(
                ctx.attribute, ctx.value, "expected a boolean literal (true/false)"
            )

        if not _BOOLEANS[value]:
            ctx.result.remove_element = True
            return

        token = NO_TOKEN
        if ctx.tokens is not None and ctx.scope.action is not None:
            token = ctx.tokens.token_for(ctx.scope.action)
        ctx.emit("name", literal(ctx.config.token_key))
        ctx.emit("value", literal(token))

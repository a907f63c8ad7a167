"""foreach directive - repeats an element and extends the form property path.

Usage:
    <dl la:foreach="item : ${form.items}">
      <dd>Qty: <input la:property="item.quantity"/></dd>
    </dl>

Result:
    <dl><dd>Qty: <input name="items[0].quantity" value="1"/></dd></dl>
    <dl><dd>Qty: <input name="items[1].quantity" value="3"/></dd></dl>
"""

from __future__ import annotations

import logging

from qwform.directives.base import DirectiveHandler
from qwform.engine.rewrite import (
    AttributeDirective,
    DirectiveContext,
    IterationRequest,
    trailing_property,
)
from qwform.engine.segment import find_top_level, parse_iteration_spec
from qwform.exceptions import MalformedDirectiveError

log = logging.getLogger(__name__)


class ForEachDirective(DirectiveHandler):
    directive = AttributeDirective("foreach", precedence=200)

    def handle(self, ctx: DirectiveContext) -> None:
        if find_top_level(ctx.value, ":") < 0:
            raise MalformedDirectiveError(
                ctx.attribute, ctx.value, "expected 'var : iterable'"
            )
        if ctx.has_explicit("each"):
            log.warning(f"{ctx.directive_text} ignored, the element has its own each")
            return

        spec = parse_iteration_spec(ctx.value, attribute=ctx.attribute)
        ctx.result.iteration = IterationRequest(
            iter_var_name=spec.iter_var_name,
            status_var_name=spec.status_var_name,
            iterable=spec.reference,
            segment=trailing_property(spec.reference),
        )
        ctx.result.reevaluate = True

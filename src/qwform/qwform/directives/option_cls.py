"""optionCls directive - expands a classification into option elements.

Usage:
    <select la:property="memberStatus">
      <option la:optionCls="MemberStatus"></option>
    </select>

Expanded to:
    <option th:each="cdef, cdefStat : cls.list('MemberStatus')"
            th:value="cls.code(cdef)" th:text="cls.alias(cdef)"
            th:selected="cls.code(cdef) == memberStatus"></option>
"""

from __future__ import annotations

import logging

from qwform.directives.base import DirectiveHandler
from qwform.engine.classification import ClassificationExpander
from qwform.engine.rewrite import AttributeDirective, DirectiveContext, literal
from qwform.engine.segment import parse_iteration_spec
from qwform.exceptions import MalformedDirectiveError

log = logging.getLogger(__name__)

OPTION_TAG = "option"


class OptionClsDirective(DirectiveHandler):
    directive = AttributeDirective("optionCls", precedence=200)

    def handle(self, ctx: DirectiveContext) -> None:
        if ctx.tag != OPTION_TAG:
            raise MalformedDirectiveError(
                ctx.attribute, ctx.value, f"only allowed on <option>, found <{ctx.tag}>"
            )
        spec = parse_iteration_spec(
            ctx.value, ctx.config.default_iter_var, attribute=ctx.attribute
        )
        if ctx.expander is not None:
            # unknown names fail here with the template path, not mid-render
            ctx.expander.expand(spec.reference, ctx.scope.template_path, ctx.directive_text)

        iter_var = spec.iter_var_name
        ctx.emit(
            "each",
            f"{iter_var}, {spec.status_var_name} : cls.list({literal(spec.reference)})",
        )
        ctx.emit("value", f"cls.code({iter_var})")
        ctx.emit("text", f"cls.alias({iter_var})")

        if not ctx.has_explicit("selected"):
            binding = ctx.nearest_select_binding()
            if binding is not None:
                ctx.emit(
                    "selected",
                    ClassificationExpander.selected_expression(
                        iter_var, binding.property_name, binding.multiple
                    ),
                )
            else:
                log.debug(f"No bound select for {ctx.directive_text}")
        ctx.result.reevaluate = True

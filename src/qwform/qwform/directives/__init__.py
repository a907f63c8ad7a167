"""Built-in rewrite directives.

- errors: validation messages for a field or all fields
- property: form field name/value/text binding
- optionCls: classification options inside a select
- token: anti-double-submit hidden field
- foreach: repetition that extends the form property path
"""

from qwform.directives.base import DirectiveHandler
from qwform.directives.errors import ErrorsDirective
from qwform.directives.foreach import ForEachDirective
from qwform.directives.option_cls import OptionClsDirective
from qwform.directives.property import PropertyDirective
from qwform.directives.token import TokenDirective


def builtin_handlers() -> list[DirectiveHandler]:
    """Handlers in registration order; equal precedence keeps this order."""
    return [
        ErrorsDirective(),
        PropertyDirective(),
        TokenDirective(),
        ForEachDirective(),
        OptionClsDirective(),
    ]


__all__ = [
    "DirectiveHandler",
    "ErrorsDirective",
    "ForEachDirective",
    "OptionClsDirective",
    "PropertyDirective",
    "TokenDirective",
    "builtin_handlers",
]

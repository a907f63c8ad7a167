"""Parser for iteration-style directive values.

    "cdef, cdefStat : MemberStatus"  -> iter=cdef, status=cdefStat, ref=MemberStatus
    "prod : MemberStatus"            -> iter=prod, status=prodStat, ref=MemberStatus
    "MemberStatus"                   -> iter=cdef, status=cdefStat, ref=MemberStatus
"""

from __future__ import annotations

from dataclasses import dataclass

from qwform.exceptions import MalformedDirectiveError

DEFAULT_ITER_VAR = "cdef"
STATUS_VAR_SUFFIX = "Stat"

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_QUOTES = ("'", '"')


@dataclass(frozen=True)
class IterationSpec:
    """Named parts of an iteration directive value."""

    iter_var_name: str
    status_var_name: str
    reference: str


def find_top_level(value: str, delimiter: str) -> int:
    """Index of the first `delimiter` outside brackets and quotes, or -1."""
    closers: list[str] = []
    quote: str | None = None
    for i, ch in enumerate(value):
        if quote is not None:
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch in _OPENERS:
            closers.append(_OPENERS[ch])
        elif closers and ch == closers[-1]:
            closers.pop()
        elif ch == delimiter and not closers:
            return i
    return -1


def strip_expression(value: str) -> str:
    """Strip a `${...}` wrapper, leaving the inner expression."""
    value = value.strip()
    if value.startswith("${") and value.endswith("}"):
        return value[2:-1].strip()
    return value


def parse_iteration_spec(
    value: str,
    default_iter_var: str = DEFAULT_ITER_VAR,
    attribute: str = "optionCls",
) -> IterationSpec:
    """Parse a raw directive value into iteration variable names and a reference.

    Args:
        value: Raw attribute value
        default_iter_var: Iteration variable used when the value has no colon
        attribute: Attribute name, for error messages

    Returns:
        The parsed IterationSpec

    Raises:
        MalformedDirectiveError: If a variable name or the reference is empty
    """
    if value is None:
        raise MalformedDirectiveError(attribute, "", "the value is empty")

    separator = find_top_level(value, ":")
    if separator < 0:
        reference = strip_expression(value)
        if not reference:
            raise MalformedDirectiveError(attribute, value, "the reference is empty")
        return IterationSpec(
            default_iter_var, default_iter_var + STATUS_VAR_SUFFIX, reference
        )

    left = value[:separator].strip()
    reference = strip_expression(value[separator + 1 :])

    comma = left.find(",")
    if comma < 0:
        iter_var = left
        status_var = iter_var + STATUS_VAR_SUFFIX
    else:
        iter_var = left[:comma].strip()
        status_var = left[comma + 1 :].strip()
        if not status_var:
            raise MalformedDirectiveError(
                attribute, value, "the status variable name is empty"
            )

    if not iter_var:
        raise MalformedDirectiveError(
            attribute, value, "the iteration variable name is empty"
        )
    if not reference:
        raise MalformedDirectiveError(attribute, value, "the reference is empty")

    return IterationSpec(iter_var, status_var, reference)

"""Date helpers exposed to templates as `handy`.

Usage:
    <span th:text="handy.format(member.birthdate)"></span>          2006-09-26
    <span th:text="handy.format(member.birthdate, '%Y/%m/%d')"></span>  2006/09/26
    <span th:text="handy.date('26.09.2006', '%d.%m.%Y').year"></span>   2006

Patterns are `strftime` / `strptime` patterns. The default matches the value
format of `<input type="date">`.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

DEFAULT_DATE_PATTERN = "%Y-%m-%d"


class HandyDateObject:
    """The `handy` object injected into every render context."""

    def __init__(self, pattern: str = DEFAULT_DATE_PATTERN):
        self.pattern = pattern

    def date(self, expression: Any, pattern: str | None = None) -> date | datetime:
        """Date or datetime for a date value or a date string.

        Args:
            expression: date, datetime or string
            pattern: strptime pattern for a string; ISO 8601 when omitted

        Raises:
            TypeError: If the expression is not a date, datetime or string
            ValueError: If the string does not match the pattern
        """
        if isinstance(expression, (date, datetime)):
            if pattern is not None:
                raise TypeError("A parse pattern is only allowed for string dates")
            return expression
        if isinstance(expression, str):
            if pattern is not None:
                return datetime.strptime(expression, pattern)
            text = expression.strip()
            if len(text) == len("YYYY-MM-DD"):
                return date.fromisoformat(text)
            return datetime.fromisoformat(text)
        raise TypeError(
            f"Date expression should be date, datetime or str: {expression!r}"
        )

    def format(self, expression: Any, pattern: str | None = None) -> str | None:
        """Formatted date, or None when the expression is None."""
        if expression is None:
            return None
        return self.date(expression).strftime(pattern or self.pattern)

"""QWForm Exceptions

Custom exceptions raised while rewriting and rendering templates.
Every error terminates the current render; none are retried.
"""

from __future__ import annotations

from typing import Any, Mapping


def build_message(notice: str, items: list[tuple[str, Any]]) -> str:
    """Build a multi-line diagnostic message.

    Args:
        notice: One-line summary shown first
        items: (title, value) pairs; list values are shown one per line

    Returns:
        The formatted message
    """
    lines = [notice]
    for title, value in items:
        lines.append("")
        lines.append(f"[{title}]")
        if isinstance(value, (list, tuple)):
            lines.extend(str(v) for v in value)
        else:
            lines.append(str(value))
    return "\n".join(lines)


class QwformError(Exception):
    """Base exception for all qwform errors."""

    pass


class MalformedDirectiveError(QwformError):
    """Raised when a directive value cannot be parsed into its expected shape."""

    def __init__(self, attribute: str, value: str, reason: str):
        self.attribute = attribute
        self.value = value
        self.reason = reason
        super().__init__(
            build_message(
                f"Malformed directive value: {reason}",
                [("Attribute", f'{attribute}="{value}"')],
            )
        )


class NameConflictError(QwformError):
    """Base for collisions between render-context variable names."""

    notice = "Name conflict in template variables."

    def __init__(self, name: str, variables: Mapping[str, Any], suggestion: str):
        self.name = name
        self.variables = dict(variables)
        self.suggestion = suggestion
        super().__init__(
            build_message(
                self.notice,
                [
                    ("Advice", suggestion),
                    ("Conflicting Name", name),
                    ("Current Variables", sorted(self.variables)),
                ],
            )
        )


class ReservedWordConflictError(NameConflictError):
    """Raised when a user-supplied name collides with an engine-injected name."""

    notice = "The name is reserved by the template engine."


class DataConflictError(NameConflictError):
    """Raised when a form field and registered data share the same name."""

    notice = "The name is already registered in the template variables."


class ClassificationNotFoundError(QwformError):
    """Raised when an enumeration name is unknown to the classification provider."""

    def __init__(
        self,
        name: str,
        template_path: str | None = None,
        directive: str | None = None,
    ):
        self.name = name
        self.template_path = template_path
        self.directive = directive
        super().__init__(
            build_message(
                "Not found the classification for the list.",
                [
                    ("Requested Template Path", template_path),
                    ("Target Expression", directive),
                    ("Classification Name", name),
                ],
            )
        )


class ClassificationGroupNotFoundError(QwformError):
    """Raised when the group suffix is unknown for a valid classification."""

    def __init__(
        self,
        name: str,
        group: str,
        template_path: str | None = None,
        directive: str | None = None,
    ):
        self.name = name
        self.group = group
        self.template_path = template_path
        self.directive = directive
        super().__init__(
            build_message(
                f"Not found the classification group: {group} of {name}",
                [
                    ("Requested Template Path", template_path),
                    ("Target Expression", directive),
                ],
            )
        )


class TokenPlacementError(QwformError):
    """Raised when the token directive is placed on anything but a hidden input."""

    def __init__(self, tag: str, input_type: str | None, template_path: str | None = None):
        self.tag = tag
        self.input_type = input_type
        self.template_path = template_path
        if tag != "input":
            notice = "Cannot use the token attribute except input tag."
            detail = ("Tag Name", tag)
        else:
            notice = "Cannot use the token attribute except hidden type."
            detail = ("Input Type", input_type)
        super().__init__(
            build_message(
                notice,
                [
                    (
                        "Advice",
                        [
                            "The token attribute should be used at hidden type like this:",
                            '  (x): <input type="text" la:token="true"/>',
                            '  (o): <input type="hidden" la:token="true"/>',
                        ],
                    ),
                    ("Template Path", template_path),
                    detail,
                ],
            )
        )


class UnresolvedExpressionError(QwformError):
    """Raised when the host engine fails to evaluate a directive expression."""

    def __init__(
        self,
        expression: str,
        template_path: str | None,
        attribute: str | None,
        cause: str,
    ):
        self.expression = expression
        self.template_path = template_path
        self.attribute = attribute
        self.cause = cause
        super().__init__(
            build_message(
                f"Cannot evaluate the template expression: {cause}",
                [
                    ("Template Path", template_path),
                    ("Attribute", attribute),
                    ("Expression", expression),
                ],
            )
        )


class TemplateNotFoundError(QwformError):
    """Raised when a template file cannot be located."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Template not found: {path}")


class DataFileError(QwformError):
    """Raised when a render data file does not have the expected layout."""

    def __init__(self, path: str, reason: str, entry: Any = None):
        self.path = path
        self.reason = reason
        self.entry = entry
        items: list[tuple[str, Any]] = [("Data File", path)]
        if entry is not None:
            items.append(("Entry", entry))
        super().__init__(build_message(f"Invalid data file: {reason}", items))

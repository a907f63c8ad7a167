"""Validation messages exposed to templates as `errors`.

Templates reach the holder through generated directives:
    th:each="er : errors.messages_for('memberName')"
    th:classappend="'validError' if errors.has_error_for('memberName') else ''"
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable

import msgspec

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserMessage:
    """A message key with its format arguments, attached to one property."""

    property: str
    key: str
    args: tuple[Any, ...] = ()


@dataclass(frozen=True)
class ResolvedMessage:
    """A user message with its text resolved from the catalog."""

    origin: UserMessage
    message: str

    @property
    def key(self) -> str:
        return self.origin.key

    def __str__(self) -> str:
        return self.message


class MessageCatalog:
    """Message texts keyed by message key, optionally per locale.

    YAML layout:
        default:
          errors.required: "{0} is required"
        ja:
          errors.required: "{0}は必須です"
    """

    def __init__(self, messages: Dict[str, Dict[str, str]] | None = None):
        self._messages = messages or {}

    @classmethod
    def from_file(cls, path: str | Path) -> "MessageCatalog":
        p = Path(path)
        log.debug(f"Loading messages from {p}")
        return cls(msgspec.yaml.decode(p.read_bytes(), type=Dict[str, Dict[str, str]]))

    def resolve(self, message: UserMessage, locale: str | None = None) -> str:
        for bundle in self._bundles(locale):
            if message.key in bundle:
                return bundle[message.key].format(*message.args)
        # unknown keys render as-is so a missing catalog entry stays visible
        return message.key

    def _bundles(self, locale: str | None) -> Iterable[Dict[str, str]]:
        if locale:
            if locale in self._messages:
                yield self._messages[locale]
            language = locale.replace("-", "_").split("_")[0]
            if language != locale and language in self._messages:
                yield self._messages[language]
        if "default" in self._messages:
            yield self._messages["default"]


@dataclass
class ErrorMessages:
    """Validation-error holder for one request."""

    messages: list[UserMessage] = field(default_factory=list)
    catalog: MessageCatalog = field(default_factory=MessageCatalog)
    locale: str | None = None

    def add(self, property: str, key: str, *args: Any) -> "ErrorMessages":
        self.messages.append(UserMessage(property, key, args))
        return self

    def has_error_for(self, property: str, key: str | None = None) -> bool:
        return any(
            m.property == property and (key is None or m.key == key)
            for m in self.messages
        )

    def messages_for(self, property: str) -> list[ResolvedMessage]:
        return [self._resolve(m) for m in self.messages if m.property == property]

    def all_messages(self) -> list[ResolvedMessage]:
        return [self._resolve(m) for m in self.messages]

    @property
    def is_empty(self) -> bool:
        return not self.messages

    def size(self, property: str | None = None) -> int:
        if property is None:
            return len(self.messages)
        return sum(1 for m in self.messages if m.property == property)

    def _resolve(self, message: UserMessage) -> ResolvedMessage:
        return ResolvedMessage(message, self.catalog.resolve(message, self.locale))

"""Classification expander - enumerations rendered as option lists.

A classification reference is an enumeration name with an optional group
suffix: `MemberStatus` lists every member, `MemberStatus.serviceAvailable`
lists the members tagged with that group.

Definitions are loaded from YAML:

    alias_keys:
      ja: aliasJa
    classifications:
      MemberStatus:
        - code: FML
          name: Formalized
          alias: Formal Member
          groups: [serviceAvailable]
          sub_items: {aliasJa: "正式会員"}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

import msgspec

from qwform.exceptions import (
    ClassificationGroupNotFoundError,
    ClassificationNotFoundError,
)

log = logging.getLogger(__name__)

GROUP_DELIMITER = "."


@dataclass(frozen=True)
class ClassificationMember:
    """One member of a classification, ordered within its classification."""

    code: str
    alias: str
    name: str = ""
    group_tags: frozenset[str] = frozenset()
    sub_items: Dict[str, str] = field(default_factory=dict, compare=False, hash=False)


class ClassificationProvider(Protocol):
    """Source of classification members.

    `resolve` and `resolve_group` raise KeyError for an unknown enumeration
    name; `resolve_group` returns an empty list for an unknown group.
    """

    def resolve(self, name: str) -> Sequence[ClassificationMember]: ...

    def resolve_group(self, name: str, group: str) -> Sequence[ClassificationMember]: ...

    def determine_alias_key(self, locale: str | None) -> str | None: ...


# =============================================================================
# YAML definitions
# =============================================================================


class MemberDef(msgspec.Struct):
    code: str
    alias: Optional[str] = None
    name: Optional[str] = None
    groups: List[str] = msgspec.field(default_factory=list)
    sub_items: Dict[str, str] = msgspec.field(default_factory=dict)

    def to_member(self) -> ClassificationMember:
        return ClassificationMember(
            code=self.code,
            alias=self.alias if self.alias is not None else (self.name or self.code),
            name=self.name or self.code,
            group_tags=frozenset(self.groups),
            sub_items=dict(self.sub_items),
        )


class ClassificationFile(msgspec.Struct):
    """Top-level layout of a classification definition file."""

    classifications: Dict[str, List[MemberDef]]
    alias_keys: Dict[str, str] = msgspec.field(default_factory=dict)


class ListedClassificationProvider:
    """In-memory provider backed by explicit member lists."""

    def __init__(
        self,
        classifications: Dict[str, Sequence[ClassificationMember]] | None = None,
        alias_keys: Dict[str, str] | None = None,
    ):
        self._classifications = {
            name: tuple(members) for name, members in (classifications or {}).items()
        }
        self._alias_keys = dict(alias_keys or {})

    @classmethod
    def from_yaml(cls, text: str) -> "ListedClassificationProvider":
        decoded = msgspec.yaml.decode(text, type=ClassificationFile)
        return cls(
            {
                name: [d.to_member() for d in defs]
                for name, defs in decoded.classifications.items()
            },
            decoded.alias_keys,
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "ListedClassificationProvider":
        p = Path(path)
        log.debug(f"Loading classifications from {p}")
        return cls.from_yaml(p.read_text())

    def names(self) -> list[str]:
        return list(self._classifications)

    def resolve(self, name: str) -> Sequence[ClassificationMember]:
        return self._classifications[name]

    def resolve_group(self, name: str, group: str) -> Sequence[ClassificationMember]:
        return [m for m in self._classifications[name] if group in m.group_tags]

    def determine_alias_key(self, locale: str | None) -> str | None:
        if not locale:
            return None
        if locale in self._alias_keys:
            return self._alias_keys[locale]
        # "ja_JP" falls back to "ja"
        language = locale.replace("-", "_").split("_")[0]
        return self._alias_keys.get(language)


# =============================================================================
# Expander
# =============================================================================


def split_reference(reference: str) -> tuple[str, str | None]:
    """Split `Name.group` into ("Name", "group"); no suffix gives ("Name", None)."""
    name, delim, group = reference.partition(GROUP_DELIMITER)
    return name, (group if delim else None)


class ClassificationExpander:
    """Expands classification references and builds option selection expressions."""

    def __init__(self, provider: ClassificationProvider, locale: str | None = None):
        self.provider = provider
        self.locale = locale

    def expand(
        self,
        reference: str,
        template_path: str | None = None,
        directive: str | None = None,
    ) -> list[ClassificationMember]:
        """Ordered members for a reference.

        Raises:
            ClassificationNotFoundError: If the enumeration name is unknown
            ClassificationGroupNotFoundError: If the group suffix is unknown
        """
        name, group = split_reference(reference)
        try:
            members = self.provider.resolve(name)
        except KeyError as e:
            raise ClassificationNotFoundError(name, template_path, directive) from e
        if group is None:
            return list(members)

        grouped = self.provider.resolve_group(name, group)
        if not grouped:
            raise ClassificationGroupNotFoundError(
                name, group, template_path, directive
            )
        return list(grouped)

    def alias(self, member: ClassificationMember, locale: str | None = None) -> str:
        """Locale-specific alias when configured, the default alias otherwise."""
        key = self.provider.determine_alias_key(locale or self.locale)
        if key is not None and key in member.sub_items:
            return member.sub_items[key]
        return member.alias

    @staticmethod
    def selected_expression(iter_var: str, property_name: str, multiple: bool) -> str:
        """Expression deciding whether the option for `iter_var` is selected.

        A single select compares the member code with the bound value; a
        multiple select checks containment in the bound collection.
        """
        if multiple:
            return (
                f"{property_name} is not none"
                f" and cls.code({iter_var}) in {property_name}"
            )
        return f"cls.code({iter_var}) == {property_name}"


class ClassificationObject:
    """The `cls` object exposed to template expressions.

    Usage in generated directives:
        th:each="cdef, cdefStat : cls.list('MemberStatus')"
        th:value="cls.code(cdef)"
        th:text="cls.alias(cdef)"
    """

    def __init__(self, expander: ClassificationExpander, template_path: str | None = None):
        self.expander = expander
        self.template_path = template_path

    def list(self, reference: str) -> list[ClassificationMember]:
        return self.expander.expand(
            reference, self.template_path, f"list('{reference}')"
        )

    def list_all(self, name: str) -> list[ClassificationMember]:
        return self.expander.expand(name, self.template_path, f"list_all('{name}')")

    def code(self, member: Any) -> str:
        return _assert_member(member).code

    def alias(self, member: Any) -> str:
        return self.expander.alias(_assert_member(member))

    def code_of(self, name: str, code: str) -> ClassificationMember | None:
        for member in self.list_all(name):
            if member.code == code:
                return member
        return None

    def name_of(self, name: str, element_name: str) -> ClassificationMember | None:
        for member in self.list_all(name):
            if member.name == element_name:
                return member
        return None


def _assert_member(value: Any) -> ClassificationMember:
    if not isinstance(value, ClassificationMember):
        raise TypeError(f"Non classification object specified: {value!r}")
    return value

"""Mistaken prefix lint.

Dialect directives written with the host prefix (`th:errors` instead of
`la:errors`) are silently ignored by the host engine. This pass reports them
as diagnostics; it never raises.
"""

from __future__ import annotations

from dataclasses import dataclass

from qwform.config import QwformConfig
from qwform.engine.dispatcher import DirectiveRegistry, default_registry
from qwform.host.element import Element


@dataclass(frozen=True)
class Diagnostic:
    """One mistaken attribute found in a template."""

    tag: str
    attribute: str
    value: str
    suggestion: str

    @property
    def message(self) -> str:
        return (
            f'<{self.tag}> {self.attribute}="{self.value}": '
            f"use {self.suggestion} instead"
        )


def find_mistaken_prefixes(
    root: Element,
    config: QwformConfig | None = None,
    registry: DirectiveRegistry | None = None,
) -> list[Diagnostic]:
    """Report dialect directives written with the host prefix.

    Args:
        root: Parsed template
        config: Prefix configuration
        registry: Directives to look for, the built-in ones by default

    Returns:
        Diagnostics in document order
    """
    config = config or QwformConfig()
    registry = registry or default_registry()
    mistaken = {config.host_attr(h.name): config.dialect_attr(h.name) for h in registry}

    diagnostics = []
    for element in root.iter():
        for attribute, value in element.attrs.items():
            if attribute in mistaken:
                diagnostics.append(
                    Diagnostic(element.tag, attribute, value or "", mistaken[attribute])
                )
    return diagnostics

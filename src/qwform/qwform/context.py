"""Render context - the variables visible to template expressions in one render."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Iterator

from qwform.engine.classification import (
    ClassificationExpander,
    ClassificationObject,
    ListedClassificationProvider,
)
from qwform.engine.reserved import (
    CLASSIFICATION_NAME,
    ERRORS_NAME,
    HANDY_NAME,
    MESSAGES_NAME,
    VERSION_QUERY_NAME,
    ReservedNameSet,
    ReservedWordGuard,
)
from qwform.exceptions import DataConflictError
from qwform.forms import FormSchema, schema_for
from qwform.handy import HandyDateObject
from qwform.messages import ErrorMessages

log = logging.getLogger(__name__)

SOURCE_ENGINE = "engine"
SOURCE_FORM = "form"
SOURCE_DATA = "data"


class TemplateContextVariables(Mapping):
    """Name -> value mapping owned by one render, remembering each name's source."""

    def __init__(self):
        self._values: dict[str, Any] = {}
        self._sources: dict[str, str] = {}

    def write(self, name: str, value: Any, source: str) -> None:
        self._values[name] = value
        self._sources[name] = source

    def source_of(self, name: str) -> str | None:
        return self._sources.get(name)

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"TemplateContextVariables({self._sources!r})"


class RenderContext:
    """Builds the variables for one render.

    Engine names (errors, messages, cls, vq, handy) are written first; form fields and
    registered data go through the ReservedWordGuard before being written.

    Usage:
        ctx = RenderContext(errors=errors)
        ctx.register_form(form)
        ctx.register_data("products", products)
    """

    def __init__(
        self,
        errors: ErrorMessages | None = None,
        messages: ErrorMessages | None = None,
        classifications: ClassificationObject | None = None,
        version_query: str = "",
        reserved: ReservedNameSet | None = None,
        handy: HandyDateObject | None = None,
    ):
        self.variables = TemplateContextVariables()
        self.guard = ReservedWordGuard(self.variables, reserved)

        if classifications is None:
            classifications = ClassificationObject(
                ClassificationExpander(ListedClassificationProvider())
            )
        self.variables.write(ERRORS_NAME, errors or ErrorMessages(), SOURCE_ENGINE)
        self.variables.write(MESSAGES_NAME, messages or ErrorMessages(), SOURCE_ENGINE)
        self.variables.write(CLASSIFICATION_NAME, classifications, SOURCE_ENGINE)
        self.variables.write(VERSION_QUERY_NAME, version_query, SOURCE_ENGINE)
        self.variables.write(HANDY_NAME, handy or HandyDateObject(), SOURCE_ENGINE)

    @property
    def errors(self) -> ErrorMessages:
        return self.variables[ERRORS_NAME]

    @property
    def classifications(self) -> ClassificationObject:
        return self.variables[CLASSIFICATION_NAME]

    def register_data(self, name: str, value: Any) -> "RenderContext":
        """Register one explicitly supplied datum."""
        self.guard.check_registered_data(name)
        self.variables.write(name, value, SOURCE_DATA)
        return self

    def register_form(
        self,
        form: Any,
        schema: FormSchema | None = None,
        as_name: str | None = None,
    ) -> "RenderContext":
        """Export every form field as a top-level variable.

        All names are checked before the first one is written, so a conflict
        leaves the variables untouched.

        Args:
            form: The form object
            schema: Field accessors, derived from the form type when omitted
            as_name: Also register the form object itself under this name
        """
        schema = schema or schema_for(type(form))
        values = list(schema.values(form))
        for name, _ in values:
            self.guard.check_form_property(name)
        if as_name is not None:
            self.guard.check_registered_data(as_name)
            if any(name == as_name for name, _ in values):
                raise DataConflictError(
                    as_name,
                    self.variables,
                    f"Use another as_name than the field name '{as_name}' of the form.",
                )

        for name, value in values:
            self.variables.write(name, value, SOURCE_FORM)
        if as_name is not None:
            self.variables.write(as_name, form, SOURCE_DATA)
        log.debug(f"Registered form {schema.form_type.__name__}: {[n for n, _ in values]}")
        return self

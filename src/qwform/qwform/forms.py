"""Form schemas - explicit field accessors instead of per-access reflection.

A schema maps each exported field name to a getter. Schemas for dataclasses
and pydantic models are derived once per form type and cached; any other
form type needs a hand-written schema registered with `register_schema`.
"""

from __future__ import annotations

import dataclasses
import operator
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator

from pydantic import BaseModel

Getter = Callable[[Any], Any]

_schemas: Dict[type, "FormSchema"] = {}
_schemas_lock = threading.Lock()


@dataclass(frozen=True)
class FormSchema:
    """Field name -> getter for one form type."""

    form_type: type
    fields: Dict[str, Getter]

    def values(self, form: Any) -> Iterator[tuple[str, Any]]:
        for name, getter in self.fields.items():
            yield name, getter(form)

    @classmethod
    def derive(cls, form_type: type) -> "FormSchema":
        """Build a schema from a dataclass or pydantic model type."""
        if isinstance(form_type, type) and issubclass(form_type, BaseModel):
            names = list(form_type.model_fields)
        elif dataclasses.is_dataclass(form_type):
            names = [f.name for f in dataclasses.fields(form_type)]
        else:
            raise TypeError(
                f"Cannot derive a form schema for {form_type.__name__}; "
                "register one with register_schema()"
            )
        return cls(form_type, {name: operator.attrgetter(name) for name in names})


def register_schema(schema: FormSchema) -> None:
    with _schemas_lock:
        _schemas[schema.form_type] = schema


def schema_for(form_type: type) -> FormSchema:
    """Cached schema for a form type, derived on first use."""
    schema = _schemas.get(form_type)
    if schema is not None:
        return schema
    with _schemas_lock:
        if form_type not in _schemas:
            _schemas[form_type] = FormSchema.derive(form_type)
        return _schemas[form_type]

"""Configuration for qwform.

Schema of qwform.yaml:
- dialect_prefix / host_prefix: attribute prefixes (la: / th:)
- style classes used by the property and errors directives
- token_key: submitted name of the double-submit token
- reserved_names: extra names merged into the reserved name set
- classifications / messages: YAML catalogs
- templates_dir / fallback_error_view: template lookup and error routing
- date_pattern: default strftime pattern of the `handy` date object
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from qwform.handy import DEFAULT_DATE_PATTERN

CONFIG_FILE_NAME = "qwform.yaml"


class QwformConfig(BaseModel):
    """Main qwform.yaml configuration."""

    model_config = {"extra": "forbid"}

    dialect_prefix: str = Field(default="la", description="Rewrite directive prefix")
    host_prefix: str = Field(default="th", description="Generated directive prefix")
    error_style_class: str = Field(
        default="validError", description="Class appended to fields with errors"
    )
    errors_style_class: str = Field(
        default="errors", description="Class merged onto error message elements"
    )
    token_key: str = Field(
        default="qwform.token", description="Field name of the double-submit token"
    )
    default_iter_var: str = Field(
        default="cdef", description="Iteration variable for optionCls without one"
    )
    reserved_names: list[str] = Field(
        default_factory=list, description="Extra reserved template variable names"
    )
    classifications: Path | None = Field(
        default=None, description="Classification definition YAML"
    )
    messages: Path | None = Field(default=None, description="Message catalog YAML")
    templates_dir: Path | None = Field(
        default=None, description="Template base dir, the working directory when unset"
    )
    fallback_error_view: str | None = Field(
        default=None, description="Template rendered when an expression fails"
    )
    locale: str | None = Field(default=None, description="Locale for aliases")
    date_pattern: str = Field(
        default=DEFAULT_DATE_PATTERN, description="Default pattern of handy.format"
    )

    @field_validator("dialect_prefix", "host_prefix")
    @classmethod
    def check_prefix(cls, value: str) -> str:
        value = value.strip().rstrip(":").lower()
        if not value or not value.replace("-", "").isalnum():
            raise ValueError(f"Invalid attribute prefix: {value!r}")
        return value

    def dialect_attr(self, name: str) -> str:
        """Full attribute name of a rewrite directive, e.g. `la:property`."""
        return f"{self.dialect_prefix}:{name}".lower()

    def host_attr(self, name: str) -> str:
        """Full attribute name of a host directive, e.g. `th:value`."""
        return f"{self.host_prefix}:{name}".lower()

    def resolve_path(self, base: Path) -> "QwformConfig":
        """Make relative paths relative to `base` (the config file's directory)."""
        data = self.model_dump()
        for key in ("classifications", "messages", "templates_dir"):
            value = data.get(key)
            if value is not None and not Path(value).is_absolute():
                data[key] = base / value
        return QwformConfig(**data)


def load_config(path: Path | None = None) -> QwformConfig:
    """Load qwform.yaml; a missing file yields the defaults."""
    if path is None or not path.exists():
        return QwformConfig()

    with open(path) as f:
        data: dict[str, Any] = yaml.safe_load(f) or {}

    return QwformConfig(**data).resolve_path(path.parent)


def find_config(start: Path | None = None) -> Path | None:
    """Find qwform.yaml in the start directory or its parents."""
    cwd = start or Path.cwd()
    for parent in [cwd] + list(cwd.parents):
        candidate = parent / CONFIG_FILE_NAME
        if candidate.exists():
            return candidate
    return None

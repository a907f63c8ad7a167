"""Application wiring - builds the engine and its collaborators from config."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Any, Mapping

from qwform.config import QwformConfig, find_config, load_config
from qwform.context import RenderContext
from qwform.engine.classification import (
    ClassificationExpander,
    ClassificationObject,
    ClassificationProvider,
    ListedClassificationProvider,
)
from qwform.engine.dispatcher import Dispatcher
from qwform.engine.reserved import ReservedNameSet, default_reserved_names
from qwform.handy import HandyDateObject
from qwform.messages import ErrorMessages, MessageCatalog
from qwform.renderer import TemplateEngine
from qwform.token import DoubleSubmitTokens, TokenIssuer

log = logging.getLogger(__name__)


def compute_version_query(templates_dir: Path) -> str:
    """Cache-busting query derived from the template files' modification times."""
    digest = hashlib.sha256()
    for path in sorted(Path(templates_dir).rglob("*.html")):
        digest.update(f"{path}:{path.stat().st_mtime_ns}".encode())
    return f"?v={digest.hexdigest()[:8]}"


class Qwform:
    """Entry point for host integrations.

    Usage:
        app = Qwform.from_config_file(Path("qwform.yaml"))
        ctx = app.new_context(errors=errors)
        ctx.register_form(form)
        html = app.render("member/edit.html", ctx, action="MemberEditAction")
    """

    def __init__(
        self,
        config: QwformConfig | None = None,
        provider: ClassificationProvider | None = None,
        catalog: MessageCatalog | None = None,
        tokens: TokenIssuer | None = None,
    ):
        self.config = config or QwformConfig()
        if provider is None:
            provider = (
                ListedClassificationProvider.from_file(self.config.classifications)
                if self.config.classifications
                else ListedClassificationProvider()
            )
        if catalog is None:
            catalog = (
                MessageCatalog.from_file(self.config.messages)
                if self.config.messages
                else MessageCatalog()
            )
        self.catalog = catalog
        self.tokens = tokens if tokens is not None else DoubleSubmitTokens()
        self.expander = ClassificationExpander(provider, self.config.locale)

        extra = tuple(self.config.reserved_names)
        self.reserved: ReservedNameSet = (
            ReservedNameSet(lambda: extra) if extra else default_reserved_names()
        )
        self.dispatcher = Dispatcher(self.config, expander=self.expander, tokens=self.tokens)
        self.engine = TemplateEngine(self.config, self.dispatcher)
        self._version_query: str | None = None

    @classmethod
    def from_config_file(cls, path: Path | None = None) -> "Qwform":
        path = path or find_config()
        log.debug(f"Using config {path}")
        return cls(load_config(path))

    @property
    def version_query(self) -> str:
        if self._version_query is None:
            templates_dir = self.config.templates_dir
            self._version_query = (
                compute_version_query(templates_dir) if templates_dir is not None else ""
            )
        return self._version_query

    def new_errors(self) -> ErrorMessages:
        return ErrorMessages(catalog=self.catalog, locale=self.config.locale)

    def new_context(
        self,
        errors: ErrorMessages | None = None,
        template_path: str | None = None,
    ) -> RenderContext:
        return RenderContext(
            errors=errors if errors is not None else self.new_errors(),
            messages=self.new_errors(),
            classifications=ClassificationObject(self.expander, template_path),
            version_query=self.version_query,
            reserved=self.reserved,
            handy=HandyDateObject(self.config.date_pattern),
        )

    def render(
        self,
        path: str,
        context: RenderContext | Mapping[str, Any] | None = None,
        action: str | None = None,
    ) -> str:
        return self.engine.render(path, self._context(context, path), action)

    def render_source(
        self,
        source: str,
        context: RenderContext | Mapping[str, Any] | None = None,
        action: str | None = None,
    ) -> str:
        return self.engine.render_source(
            source, self._context(context, None), action=action
        )

    def _context(
        self,
        context: RenderContext | Mapping[str, Any] | None,
        template_path: str | None,
    ) -> RenderContext:
        if isinstance(context, RenderContext):
            return context
        render_context = self.new_context(template_path=template_path)
        for name, value in (context or {}).items():
            render_context.register_data(name, value)
        return render_context

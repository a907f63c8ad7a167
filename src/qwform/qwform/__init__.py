"""QWForm - form-binding attribute dialect for HTML templates.

Declarative attributes (la:property, la:errors, la:optionCls, la:token,
la:foreach) are rewritten into host directives (th:*) before the host
engine renders the page.
"""

__version__ = "0.1.0"

from qwform.app import Qwform
from qwform.config import QwformConfig, load_config
from qwform.context import RenderContext, TemplateContextVariables
from qwform.engine.classification import (
    ClassificationExpander,
    ClassificationMember,
    ListedClassificationProvider,
)
from qwform.engine.dispatcher import Dispatcher, DirectiveRegistry, default_registry
from qwform.engine.iteration import IterationFrame, IterationStack
from qwform.engine.reserved import ReservedNameSet, ReservedWordGuard
from qwform.engine.resolver import resolve_property_path
from qwform.engine.segment import IterationSpec, parse_iteration_spec
from qwform.exceptions import (
    ClassificationGroupNotFoundError,
    ClassificationNotFoundError,
    DataConflictError,
    DataFileError,
    MalformedDirectiveError,
    QwformError,
    ReservedWordConflictError,
    TokenPlacementError,
    UnresolvedExpressionError,
)
from qwform.forms import FormSchema
from qwform.handy import HandyDateObject
from qwform.messages import ErrorMessages, MessageCatalog
from qwform.renderer import TemplateEngine
from qwform.token import DoubleSubmitTokens

__all__ = [
    "__version__",
    # app
    "Qwform",
    "QwformConfig",
    "load_config",
    "RenderContext",
    "TemplateContextVariables",
    "TemplateEngine",
    # engine
    "ClassificationExpander",
    "ClassificationMember",
    "ListedClassificationProvider",
    "Dispatcher",
    "DirectiveRegistry",
    "default_registry",
    "IterationFrame",
    "IterationStack",
    "ReservedNameSet",
    "ReservedWordGuard",
    "resolve_property_path",
    "IterationSpec",
    "parse_iteration_spec",
    # collaborators
    "FormSchema",
    "HandyDateObject",
    "ErrorMessages",
    "MessageCatalog",
    "DoubleSubmitTokens",
    # errors
    "QwformError",
    "MalformedDirectiveError",
    "ReservedWordConflictError",
    "DataConflictError",
    "DataFileError",
    "ClassificationNotFoundError",
    "ClassificationGroupNotFoundError",
    "TokenPlacementError",
    "UnresolvedExpressionError",
]

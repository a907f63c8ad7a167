import pytest

from qwform.app import Qwform
from qwform.config import QwformConfig
from qwform.context import RenderContext
from qwform.engine.classification import (
    ClassificationExpander,
    ClassificationMember,
    ListedClassificationProvider,
)
from qwform.engine.dispatcher import Dispatcher
from qwform.engine.iteration import IterationStack
from qwform.engine.rewrite import RenderScope
from qwform.messages import MessageCatalog
from qwform.token import DoubleSubmitTokens

MEMBER_STATUS = [
    ClassificationMember(
        "FML",
        "Formal Member",
        "Formalized",
        frozenset({"serviceAvailable"}),
        {"aliasJa": "正式会員"},
    ),
    ClassificationMember(
        "PRV", "Provisional Member", "Provisional", frozenset({"serviceAvailable"})
    ),
    ClassificationMember("WDL", "Withdrawal", "Withdrawal"),
]


@pytest.fixture
def provider():
    return ListedClassificationProvider(
        {"MemberStatus": MEMBER_STATUS}, alias_keys={"ja": "aliasJa"}
    )


@pytest.fixture
def catalog():
    return MessageCatalog(
        {
            "default": {"errors.required": "{0} is required"},
            "ja": {"errors.required": "{0}は必須です"},
        }
    )


@pytest.fixture
def config(tmp_path):
    return QwformConfig(templates_dir=tmp_path)


@pytest.fixture
def qw(config, provider, catalog):
    return Qwform(config, provider=provider, catalog=catalog, tokens=DoubleSubmitTokens())


@pytest.fixture
def dispatcher(config, provider):
    return Dispatcher(
        config,
        expander=ClassificationExpander(provider),
        tokens=DoubleSubmitTokens(),
    )


@pytest.fixture
def scope():
    """Factory for a fresh RenderScope."""

    def make(stack=None, context=None, **kwargs):
        context = context or RenderContext()
        return RenderScope(stack=stack or IterationStack(), guard=context.guard, **kwargs)

    return make

"""Tests for classification expansion and the `cls` expression object."""

import pytest

from qwform.engine.classification import (
    ClassificationExpander,
    ClassificationObject,
    ListedClassificationProvider,
    split_reference,
)
from qwform.exceptions import (
    ClassificationGroupNotFoundError,
    ClassificationNotFoundError,
)

CLASSIFICATIONS_YAML = """
alias_keys:
  ja: aliasJa
classifications:
  MemberStatus:
    - code: FML
      name: Formalized
      alias: Formal Member
      groups: [serviceAvailable]
      sub_items: {aliasJa: "正式会員"}
    - code: WDL
      name: Withdrawal
  Flg:
    - {code: "1", alias: "Yes"}
    - {code: "0", alias: "No"}
"""


class TestClassificationExpander:
    def test_expand_keeps_member_order(self, provider):
        members = ClassificationExpander(provider).expand("MemberStatus")
        assert [m.code for m in members] == ["FML", "PRV", "WDL"]

    def test_expand_group(self, provider):
        members = ClassificationExpander(provider).expand("MemberStatus.serviceAvailable")
        assert [m.code for m in members] == ["FML", "PRV"]

    def test_unknown_name(self, provider):
        """The error carries the template path and the directive text."""
        expander = ClassificationExpander(provider)
        with pytest.raises(ClassificationNotFoundError) as exc:
            expander.expand("Unknown", "member/edit.html", 'la:optioncls="Unknown"')
        assert exc.value.template_path == "member/edit.html"
        assert exc.value.directive == 'la:optioncls="Unknown"'
        assert "member/edit.html" in str(exc.value)

    def test_unknown_group(self, provider):
        with pytest.raises(ClassificationGroupNotFoundError) as exc:
            ClassificationExpander(provider).expand("MemberStatus.nope")
        assert exc.value.group == "nope"

    def test_unknown_name_with_group_is_name_error(self, provider):
        with pytest.raises(ClassificationNotFoundError):
            ClassificationExpander(provider).expand("Unknown.serviceAvailable")

    def test_locale_alias(self, provider):
        """A locale-specific sub item replaces the alias when present."""
        expander = ClassificationExpander(provider, locale="ja_JP")
        fml, prv, _ = expander.expand("MemberStatus")
        assert expander.alias(fml) == "正式会員"
        assert expander.alias(prv) == "Provisional Member"

    def test_default_alias_without_locale(self, provider):
        expander = ClassificationExpander(provider)
        assert expander.alias(expander.expand("MemberStatus")[0]) == "Formal Member"

    def test_single_select_expression(self):
        expr = ClassificationExpander.selected_expression("cdef", "status", False)
        assert expr == "cls.code(cdef) == status"

    def test_multiple_select_expression_guards_none(self):
        expr = ClassificationExpander.selected_expression("cdef", "statuses", True)
        assert expr == "statuses is not none and cls.code(cdef) in statuses"


class TestListedClassificationProvider:
    def test_from_yaml(self):
        provider = ListedClassificationProvider.from_yaml(CLASSIFICATIONS_YAML)
        assert provider.names() == ["MemberStatus", "Flg"]
        wdl = provider.resolve("MemberStatus")[1]
        # alias falls back to the name
        assert wdl.alias == "Withdrawal"
        assert [m.alias for m in provider.resolve("Flg")] == ["Yes", "No"]

    def test_from_file(self, tmp_path):
        path = tmp_path / "classifications.yaml"
        path.write_text(CLASSIFICATIONS_YAML)
        provider = ListedClassificationProvider.from_file(path)
        assert provider.determine_alias_key("ja") == "aliasJa"
        assert provider.determine_alias_key("en") is None

    def test_unknown_name_raises_key_error(self):
        with pytest.raises(KeyError):
            ListedClassificationProvider().resolve("Nope")


class TestClassificationObject:
    def test_code_and_alias(self, provider):
        cls = ClassificationObject(ClassificationExpander(provider))
        member = cls.list("MemberStatus")[0]
        assert cls.code(member) == "FML"
        assert cls.alias(member) == "Formal Member"

    def test_code_of_and_name_of(self, provider):
        cls = ClassificationObject(ClassificationExpander(provider))
        assert cls.code_of("MemberStatus", "WDL").name == "Withdrawal"
        assert cls.name_of("MemberStatus", "Provisional").code == "PRV"
        assert cls.code_of("MemberStatus", "XXX") is None

    def test_non_member_is_rejected(self, provider):
        cls = ClassificationObject(ClassificationExpander(provider))
        with pytest.raises(TypeError):
            cls.code("FML")


def test_split_reference():
    assert split_reference("MemberStatus") == ("MemberStatus", None)
    assert split_reference("MemberStatus.serviceAvailable") == (
        "MemberStatus",
        "serviceAvailable",
    )

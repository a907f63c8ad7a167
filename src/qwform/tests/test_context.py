"""Tests for reserved names, the guard and the render context."""

import threading
from dataclasses import dataclass

import pytest
from pydantic import BaseModel

from qwform.context import RenderContext
from qwform.engine.reserved import (
    BASE_RESERVED_NAMES,
    ReservedNameSet,
    ReservedWordGuard,
)
from qwform.exceptions import DataConflictError, ReservedWordConflictError
from qwform.forms import FormSchema, register_schema, schema_for


@dataclass
class MemberForm:
    memberName: str
    memberStatus: str


@dataclass
class BadForm:
    memberName: str
    errors: str


class ProductForm(BaseModel):
    productName: str
    price: int = 0


class TestReservedNameSet:
    def test_base_names(self):
        names = ReservedNameSet().names()
        assert {"errors", "messages", "cls", "vq", "handy"} <= names
        assert names == BASE_RESERVED_NAMES

    def test_hook_names_are_merged(self):
        reserved = ReservedNameSet(lambda: ["session"])
        assert "session" in reserved
        assert "errors" in reserved

    def test_hook_runs_once_under_concurrency(self):
        """Concurrent first lookups initialize the set exactly once."""
        calls = []

        def hook():
            calls.append(1)
            return ["session"]

        reserved = ReservedNameSet(hook)
        threads = [threading.Thread(target=reserved.names) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(calls) == 1

    def test_initialize_after_lookup_fails(self):
        reserved = ReservedNameSet()
        reserved.names()
        with pytest.raises(RuntimeError):
            reserved.initialize(lambda: ["late"])

    def test_initialize_before_lookup(self):
        reserved = ReservedNameSet()
        reserved.initialize(lambda: ["session"])
        assert "session" in reserved


class TestReservedWordGuard:
    def test_reserved_name_is_rejected(self):
        guard = ReservedWordGuard({})
        with pytest.raises(ReservedWordConflictError) as exc:
            guard.check_registered_data("errors")
        assert exc.value.name == "errors"
        assert "errors" in exc.value.suggestion

    def test_reserved_is_checked_before_written_names(self):
        """A reserved name that is also written reports the reserved conflict."""
        guard = ReservedWordGuard({"vq": "?v=1"})
        with pytest.raises(ReservedWordConflictError):
            guard.check_form_property("vq")

    def test_written_name_conflicts(self):
        guard = ReservedWordGuard({"memberName": "Ariel"})
        with pytest.raises(DataConflictError) as exc:
            guard.check_registered_data("memberName")
        assert exc.value.variables == {"memberName": "Ariel"}

    def test_extension_names(self):
        guard = ReservedWordGuard({}, ReservedNameSet(lambda: ["session"]))
        with pytest.raises(ReservedWordConflictError):
            guard.check_form_property("session")


class TestRenderContext:
    def test_engine_names_are_written_first(self):
        ctx = RenderContext(version_query="?v=abc")
        assert list(ctx.variables) == ["errors", "messages", "cls", "vq", "handy"]
        assert ctx.variables.source_of("vq") == "engine"
        assert ctx.variables["vq"] == "?v=abc"

    def test_register_form_exports_fields(self):
        ctx = RenderContext().register_form(MemberForm("Ariel", "FML"))
        assert ctx.variables["memberName"] == "Ariel"
        assert ctx.variables.source_of("memberStatus") == "form"

    def test_reserved_form_field_writes_nothing(self):
        """A reserved field name fails before any field is written."""
        ctx = RenderContext()
        with pytest.raises(ReservedWordConflictError):
            ctx.register_form(BadForm("Ariel", "oops"))
        assert "memberName" not in ctx.variables

    def test_data_conflicts_with_form_field(self):
        ctx = RenderContext().register_form(MemberForm("Ariel", "FML"))
        with pytest.raises(DataConflictError):
            ctx.register_data("memberName", "other")

    def test_form_conflicts_with_data(self):
        ctx = RenderContext().register_data("memberStatus", "x")
        with pytest.raises(DataConflictError):
            ctx.register_form(MemberForm("Ariel", "FML"))

    def test_register_form_as_name(self):
        form = MemberForm("Ariel", "FML")
        ctx = RenderContext().register_form(form, as_name="form")
        assert ctx.variables["form"] is form

    def test_as_name_conflicts_with_form_field(self):
        form = MemberForm("Ariel", "FML")
        ctx = RenderContext()
        with pytest.raises(DataConflictError) as exc_info:
            ctx.register_form(form, as_name="memberName")
        assert exc_info.value.name == "memberName"
        assert "memberName" not in ctx.variables
        assert "memberStatus" not in ctx.variables

    def test_registered_data_cannot_be_reserved(self):
        with pytest.raises(ReservedWordConflictError):
            RenderContext().register_data("cls", object())


class TestFormSchema:
    def test_derive_dataclass(self):
        schema = FormSchema.derive(MemberForm)
        assert list(schema.fields) == ["memberName", "memberStatus"]

    def test_derive_pydantic_model(self):
        values = dict(FormSchema.derive(ProductForm).values(ProductForm(productName="Pen")))
        assert values == {"productName": "Pen", "price": 0}

    def test_schema_is_cached_per_type(self):
        assert schema_for(MemberForm) is schema_for(MemberForm)

    def test_plain_class_needs_registered_schema(self):
        class Legacy:
            def __init__(self):
                self.code = "X"

        with pytest.raises(TypeError):
            FormSchema.derive(Legacy)

        register_schema(FormSchema(Legacy, {"legacyCode": lambda f: f.code}))
        ctx = RenderContext().register_form(Legacy())
        assert ctx.variables["legacyCode"] == "X"

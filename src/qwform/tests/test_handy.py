"""Tests for the handy date object."""

from datetime import date, datetime

import pytest

from qwform.app import Qwform
from qwform.config import QwformConfig
from qwform.context import RenderContext
from qwform.exceptions import ReservedWordConflictError
from qwform.handy import HandyDateObject


class TestHandyDateObject:
    def test_format_date(self):
        assert HandyDateObject().format(date(2006, 9, 26)) == "2006-09-26"

    def test_format_datetime_and_iso_strings(self):
        handy = HandyDateObject()
        assert handy.format(datetime(2006, 9, 26, 13, 45)) == "2006-09-26"
        assert handy.format("2006-09-26") == "2006-09-26"
        assert handy.format("2006-09-26T13:45:00", "%H:%M") == "13:45"

    def test_configured_pattern(self):
        handy = HandyDateObject("%Y/%m/%d")
        assert handy.format(date(2006, 9, 26)) == "2006/09/26"
        assert handy.format(date(2006, 9, 26), "%d.%m.%Y") == "26.09.2006"

    def test_none_formats_to_none(self):
        assert HandyDateObject().format(None) is None

    def test_parse_with_pattern(self):
        parsed = HandyDateObject().date("26.09.2006", "%d.%m.%Y")
        assert (parsed.year, parsed.month, parsed.day) == (2006, 9, 26)

    def test_date_is_returned_as_is(self):
        value = date(2006, 9, 26)
        assert HandyDateObject().date(value) is value

    def test_unsupported_values(self):
        handy = HandyDateObject()
        with pytest.raises(TypeError):
            handy.date(20060926)
        with pytest.raises(TypeError):
            handy.date(date(2006, 9, 26), "%Y")
        with pytest.raises(ValueError):
            handy.date("26.09.2006")


class TestHandyInTemplates:
    def test_render_with_configured_pattern(self, tmp_path, provider):
        config = QwformConfig(templates_dir=tmp_path, date_pattern="%Y/%m/%d")
        qw = Qwform(config, provider=provider)
        ctx = qw.new_context().register_data("birthdate", date(2006, 9, 26))
        html = qw.render_source(
            '<span th:text="handy.format(birthdate)"></span>'
            "<span th:text=\"handy.format(birthdate, '%d.%m.%Y')\"></span>",
            ctx,
        )
        assert html == "<span>2006/09/26</span><span>26.09.2006</span>"

    def test_handy_is_reserved(self):
        with pytest.raises(ReservedWordConflictError):
            RenderContext().register_data("handy", object())

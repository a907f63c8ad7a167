"""Tests for the iteration stack and the property path resolver."""

import pytest

from qwform.engine.iteration import IterationFrame, IterationStack, join_prefix
from qwform.engine.resolver import resolve_property_path


class TestIterationStack:
    def test_current_is_none_when_empty(self):
        assert IterationStack().current() is None

    def test_enter_joins_parent_prefix(self):
        """Nested frames extend the parent's path prefix."""
        stack = IterationStack()
        stack.enter("order", "orderStat", 0, segment="orders")
        frame = stack.enter("line", "lineStat", 2, segment="lines")
        assert frame.path_prefix == "orders[0].lines[2]"
        assert stack.current() is frame

    def test_segment_defaults_to_iter_var(self):
        frame = IterationStack().enter("item", "itemStat", 1)
        assert frame.path_prefix == "item[1]"

    def test_find_by_iter_var_returns_nearest(self):
        """Inner frames shadow outer frames bound to the same name."""
        stack = IterationStack()
        outer = stack.enter("item", "itemStat", 0)
        inner = stack.enter("item", "itemStat", 1)
        assert stack.find_by_iter_var("item") is inner
        stack.pop()
        assert stack.find_by_iter_var("item") is outer

    def test_frame_pops_on_error(self):
        """push/pop stay balanced when an item's subtree fails."""
        stack = IterationStack()
        with pytest.raises(ValueError):
            with stack.frame("item", "itemStat", 0):
                assert len(stack) == 1
                raise ValueError("boom")
        assert len(stack) == 0

    def test_join_prefix_at_root(self):
        assert join_prefix("", "items", 3) == "items[3]"


class TestResolvePropertyPath:
    def test_plain_name_outside_iteration(self):
        assert resolve_property_path("memberName", IterationStack()) == "memberName"

    def test_nested_indexing(self):
        stack = IterationStack([IterationFrame("items", "itemsStat", "items[2]", 2)])
        assert resolve_property_path("items.quantity", stack) == "items[2].quantity"

    def test_shadowing_uses_inner_frame(self):
        stack = IterationStack(
            [
                IterationFrame("item", "itemStat", "item[0]", 0),
                IterationFrame("item", "itemStat", "outer[0].item[1]", 1),
            ]
        )
        assert resolve_property_path("item.sku", stack) == "outer[0].item[1].sku"

    def test_scalar_item_resolves_to_prefix(self):
        stack = IterationStack([IterationFrame("tag", "tagStat", "tags[4]", 4)])
        assert resolve_property_path("tag", stack) == "tags[4]"

    def test_unmatched_dotted_path_passes_through(self):
        """No frame binds the head segment: the literal path is kept."""
        stack = IterationStack([IterationFrame("item", "itemStat", "items[0]", 0)])
        assert resolve_property_path("member.address.city", stack) == (
            "member.address.city"
        )

    def test_unmatched_plain_name_inside_frame(self):
        stack = IterationStack([IterationFrame("item", "itemStat", "items[0]", 0)])
        assert resolve_property_path("memberName", stack) == "memberName"

    def test_resolution_is_deterministic(self):
        stack = IterationStack()
        stack.enter("order", "orderStat", 1, segment="orders")
        stack.enter("line", "lineStat", 0, segment="lines")
        first = resolve_property_path("line.sku", stack)
        assert first == resolve_property_path("line.sku", stack)
        assert first == "orders[1].lines[0].sku"

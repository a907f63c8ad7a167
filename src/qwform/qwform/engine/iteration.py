"""Iteration context stack.

One frame per iterated item of a repeating element. Frames carry the
property-path prefix submitted for fields rendered inside that item, so
`la:property="item.quantity"` inside the third item of `items` becomes
`items[2].quantity`.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class IterationFrame:
    """Bound state for one iterated item."""

    iter_var_name: str
    status_var_name: str
    path_prefix: str
    index: int


def join_prefix(parent_prefix: str, segment: str, index: int) -> str:
    """Build `<parent>.<segment>[<index>]`, or `<segment>[<index>]` at the root."""
    indexed = f"{segment}[{index}]"
    return f"{parent_prefix}.{indexed}" if parent_prefix else indexed


class IterationStack:
    """Stack of iteration frames owned by a single render."""

    def __init__(self, frames: list[IterationFrame] | None = None):
        self._frames: list[IterationFrame] = list(frames or [])

    def push(self, frame: IterationFrame) -> None:
        log.debug(f"push frame {frame.iter_var_name} -> {frame.path_prefix}")
        self._frames.append(frame)

    def pop(self) -> IterationFrame:
        frame = self._frames.pop()
        log.debug(f"pop frame {frame.iter_var_name} -> {frame.path_prefix}")
        return frame

    def current(self) -> IterationFrame | None:
        return self._frames[-1] if self._frames else None

    def find_by_iter_var(self, name: str) -> IterationFrame | None:
        """Return the nearest enclosing frame that bound `name`.

        Inner frames shadow outer frames with the same variable name.
        """
        for frame in reversed(self._frames):
            if frame.iter_var_name == name:
                return frame
        return None

    def enter(
        self,
        iter_var_name: str,
        status_var_name: str,
        index: int,
        segment: str | None = None,
    ) -> IterationFrame:
        """Create and push the frame for one item.

        Args:
            iter_var_name: Name bound to the current item
            status_var_name: Name bound to the iteration status
            index: Zero-based item index
            segment: Path segment for the prefix, defaults to `iter_var_name`

        Returns:
            The pushed frame
        """
        parent = self.current()
        prefix = join_prefix(
            parent.path_prefix if parent else "", segment or iter_var_name, index
        )
        frame = IterationFrame(iter_var_name, status_var_name, prefix, index)
        self.push(frame)
        return frame

    @contextmanager
    def frame(
        self,
        iter_var_name: str,
        status_var_name: str,
        index: int,
        segment: str | None = None,
    ) -> Iterator[IterationFrame]:
        """Keep push/pop balanced around one item's subtree."""
        frame = self.enter(iter_var_name, status_var_name, index, segment)
        try:
            yield frame
        finally:
            self.pop()

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[IterationFrame]:
        return iter(self._frames)

"""Property path resolver - maps a property reference to its submitted field name."""

from __future__ import annotations

from qwform.engine.iteration import IterationStack


def resolve_property_path(raw: str, stack: IterationStack) -> str:
    """Compute the fully-qualified field name for a property reference.

    Resolution rules:
    1. `memberName` outside any iteration stays `memberName`.
    2. `item.quantity` where an enclosing frame bound `item` becomes
       `<frame prefix>.quantity`; the nearest frame wins when names shadow.
       Without a matching frame the path passes through unchanged.
    3. `item` where an enclosing frame bound `item` becomes the frame prefix
       (list items bound to scalars).

    Args:
        raw: Property reference as written in the template
        stack: Current iteration stack

    Returns:
        The resolved field name
    """
    name = raw.strip()
    head, dot, rest = name.partition(".")
    frame = stack.find_by_iter_var(head)
    if frame is None:
        return name
    if dot:
        return f"{frame.path_prefix}.{rest}"
    return frame.path_prefix

"""qwform.host - element tree and HTML parsing for the host engine."""

from qwform.host.element import Element, Raw, serialize
from qwform.host.parser import parse_html

__all__ = ["Element", "Raw", "parse_html", "serialize"]

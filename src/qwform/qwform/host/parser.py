"""HTML tree builder on top of the standard library HTMLParser."""

from __future__ import annotations

import logging
from html.parser import HTMLParser

from qwform.host.element import DOCUMENT, Element, Raw

log = logging.getLogger(__name__)


class TreeBuilder(HTMLParser):
    """Builds an Element tree, closing void elements implicitly."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.root = Element(DOCUMENT)
        self._open: list[Element] = [self.root]

    def handle_starttag(self, tag, attrs):
        element = Element(tag, dict(attrs))
        self._open[-1].append(element)
        if not element.is_void:
            self._open.append(element)

    def handle_startendtag(self, tag, attrs):
        self._open[-1].append(Element(tag, dict(attrs)))

    def handle_endtag(self, tag):
        tag = tag.lower()
        # Unwind to the matching open element; stray end tags are ignored
        for depth in range(len(self._open) - 1, 0, -1):
            if self._open[depth].tag == tag:
                del self._open[depth:]
                return
        log.debug(f"Ignoring stray end tag </{tag}>")

    def handle_data(self, data):
        self._open[-1].append(data)

    def handle_comment(self, data):
        self._open[-1].append(Raw(f"<!--{data}-->"))

    def handle_decl(self, decl):
        self._open[-1].append(Raw(f"<!{decl}>"))

    def handle_pi(self, data):
        self._open[-1].append(Raw(f"<?{data}>"))


def parse_html(text: str) -> Element:
    """Parse HTML text into a document Element.

    Args:
        text: HTML source

    Returns:
        The document root; its children are the top-level nodes
    """
    builder = TreeBuilder()
    builder.feed(text)
    builder.close()
    return builder.root

"""Read-only document sources the scanner can query.

A document source exposes the four capabilities the scanner relies on:
selector queries, attribute reads, computed background reads, and the
serialized markup. ``HtmlDocument`` serves saved HTML through BeautifulSoup,
while ``PageSnapshot`` holds what was captured from a live Playwright page.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from bs4 import BeautifulSoup, Tag

ALL_ELEMENTS = "*"

_INLINE_BACKGROUND = re.compile(r"background(?:-image)?\s*:\s*([^;]+)", re.IGNORECASE)


class DocumentSource(Protocol):
    """Capabilities a document must provide to be scanned."""

    def query_selector_all(self, selector: str) -> Sequence[Any]:
        ...

    def read_attribute(self, node: Any, name: str) -> Optional[str]:
        ...

    def read_computed_background(self, node: Any) -> Optional[str]:
        ...

    def raw_markup(self) -> str:
        ...


class HtmlDocument:
    """Document source backed by static HTML parsed with BeautifulSoup.

    Saved pages carry no computed styles, so backgrounds are read from
    inline ``style`` declarations instead.
    """

    def __init__(self, html: str) -> None:
        self._html = html
        self._soup = BeautifulSoup(html, "html.parser")

    def query_selector_all(self, selector: str) -> List[Tag]:
        if selector == ALL_ELEMENTS:
            return self._soup.find_all(True)
        return self._soup.select(selector)

    def read_attribute(self, node: Tag, name: str) -> Optional[str]:
        value = node.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def read_computed_background(self, node: Tag) -> Optional[str]:
        style = node.get("style")
        if not style:
            return None
        # Later declarations override earlier ones.
        declarations = _INLINE_BACKGROUND.findall(style)
        if not declarations:
            return None
        return declarations[-1].strip()

    def raw_markup(self) -> str:
        return self._html


@dataclass
class SnapshotElement:
    """One element as captured from the rendered page."""

    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    background: Optional[str] = None
    matched_selectors: List[str] = field(default_factory=list)


class PageSnapshot:
    """Document source built from a single evaluation of a live page."""

    def __init__(self, elements: Sequence[SnapshotElement], markup: str) -> None:
        self.elements = list(elements)
        self.markup = markup

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "PageSnapshot":
        """Create a snapshot from the JSON returned by ``SNAPSHOT_SCRIPT``."""
        elements = [
            SnapshotElement(
                tag=item.get("tag", ""),
                attributes=dict(item.get("attributes") or {}),
                background=item.get("background"),
                matched_selectors=list(item.get("matches") or []),
            )
            for item in payload.get("elements") or []
        ]
        return cls(elements, payload.get("markup") or "")

    def query_selector_all(self, selector: str) -> List[SnapshotElement]:
        if selector == ALL_ELEMENTS:
            return list(self.elements)
        return [el for el in self.elements if selector in el.matched_selectors]

    def read_attribute(self, node: SnapshotElement, name: str) -> Optional[str]:
        return node.attributes.get(name)

    def read_computed_background(self, node: SnapshotElement) -> Optional[str]:
        return node.background

    def raw_markup(self) -> str:
        return self.markup


# Evaluated in the page with {selectors, attributes}. Reads only; the DOM is
# left untouched. Image elements report their resolved ``src`` property.
SNAPSHOT_SCRIPT = """
({ selectors, attributes }) => {
  const elements = Array.from(document.querySelectorAll('*')).map((el) => {
    const attrs = {};
    for (const name of attributes) {
      const value = el.getAttribute(name);
      if (value !== null) {
        attrs[name] = value;
      }
    }
    if (el instanceof HTMLImageElement && el.src) {
      attrs.src = el.src;
    }
    const background = window.getComputedStyle(el).backgroundImage;
    return {
      tag: el.tagName.toLowerCase(),
      attributes: attrs,
      background: background && background !== 'none' ? background : null,
      matches: selectors.filter((selector) => el.matches(selector)),
    };
  });
  return { elements, markup: document.documentElement.outerHTML };
}
"""

"""
Minimal SVG element builder.

PURPOSE: Build chart markup as a tree instead of concatenated strings.
AI CONTEXT: Every attribute value and text node is escaped on output, so
labels coming from user data (logins, dates) cannot inject markup.

CONVENTIONS:
- Keyword attribute names map underscores to hyphens
  (stroke_width -> stroke-width); a trailing underscore is dropped
  (class_ -> class)
- Attribute order is insertion order, so output is deterministic
- Numbers are written with at most two decimals, trailing zeros removed

USAGE:
    root = svg_document(400, 200)
    root.add("text", "Hello & <world>", x=10, y=20, font_size=12)
    markup = root.to_string()
"""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from typing import Any

__all__ = ["SvgElement", "svg_document", "fmt_number", "SVG_NAMESPACE"]

SVG_NAMESPACE = "http://www.w3.org/2000/svg"


def fmt_number(value: float) -> str:
    """
    Format a coordinate for markup.

    Example:
        >>> fmt_number(80.0)
        '80'
        >>> fmt_number(1 / 3)
        '0.33'
    """
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def _attr_name(name: str) -> str:
    return name.rstrip("_").replace("_", "-")


def _attr_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return fmt_number(value)
    return str(value)


@dataclass
class SvgElement:
    """One SVG/XML element with attributes, optional text and children."""

    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    text: str | None = None
    children: list[SvgElement] = field(default_factory=list)

    def set(self, name: str, value: Any) -> SvgElement:
        """Set an attribute using its literal name (e.g. 'hx-vals')."""
        self.attrs[name] = _attr_value(value)
        return self

    def add(self, tag: str, text: str | None = None, **attrs: Any) -> SvgElement:
        """
        Append a child element and return it.

        Attributes whose value is None are omitted.

        Args:
            tag: Element name ('line', 'text', 'g', ...).
            text: Optional text content (escaped on output).
            **attrs: Attribute values; names follow the module conventions.

        Returns:
            The new child, so nested structures can be built fluently.
        """
        child = SvgElement(tag, text=text)
        for name, value in attrs.items():
            if value is not None:
                child.set(_attr_name(name), value)
        self.children.append(child)
        return child

    def find(self, element_id: str) -> SvgElement | None:
        """Depth-first lookup by id attribute."""
        if self.attrs.get("id") == element_id:
            return self
        for child in self.children:
            found = child.find(element_id)
            if found is not None:
                return found
        return None

    def to_string(self) -> str:
        """Serialize the element and its subtree with escaping."""
        attrs = "".join(
            f' {name}="{html.escape(value, quote=True)}"' for name, value in self.attrs.items()
        )
        if self.text is None and not self.children:
            return f"<{self.tag}{attrs}/>"
        inner = html.escape(self.text, quote=False) if self.text is not None else ""
        inner += "".join(child.to_string() for child in self.children)
        return f"<{self.tag}{attrs}>{inner}</{self.tag}>"


def svg_document(width: float, height: float, **attrs: Any) -> SvgElement:
    """Create a root <svg> element with namespace, size and viewBox."""
    root = SvgElement("svg")
    root.set("xmlns", SVG_NAMESPACE)
    root.set("width", width)
    root.set("height", height)
    root.set("viewBox", f"0 0 {fmt_number(width)} {fmt_number(height)}")
    for name, value in attrs.items():
        if value is not None:
            root.set(_attr_name(name), value)
    return root

"""Markup tree normalisation and classification.

A markup element is a ``list`` of the form ``[tag, attrs?, *children]``
where *tag* may carry CSS-style shorthand (``"td#total.num.bold"``).  This
module turns such elements into canonical :class:`Element` triples and
classifies any expression of the tree into a :class:`Kind` that the
renderer dispatches on.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Any, NamedTuple, Optional

from markup2xlsx.errors import InvalidElementName


# ---------------------------------------------------------------------------
# Node definitions
# ---------------------------------------------------------------------------

class Kind(Enum):
    TABLE = "table"
    ROW = "row"
    CELL = "cell"
    UNORDERED_LIST = "unordered_list"
    ORDERED_LIST = "ordered_list"
    LIST_ITEM = "list_item"
    GENERIC = "generic"
    LITERAL = "literal"
    SEQUENCE = "sequence"
    EMPTY = "empty"


class Strategy(Enum):
    """How the head of an element vector is laid out."""

    ALL_LITERAL = "all_literal"                      # ["span", "foo"]
    LITERAL_TAG_AND_ATTRS = "literal_tag_and_attrs"  # ["span", {...}, x]
    LITERAL_TAG = "literal_tag"                      # ["span", x]
    DYNAMIC_TAG = "dynamic_tag"                      # [x, ...]


class TagSpec(NamedTuple):
    tag: str
    id: Optional[str]
    classes: tuple[str, ...]


class Element(NamedTuple):
    """Canonical ``(tag, attrs, content)`` form of an element."""

    tag: str
    attrs: dict[str, Any]
    content: Any


class RenderResult(NamedTuple):
    """Extent occupied by a rendered expression and its annotated tree."""

    width: int
    height: int
    tree: Any


# Tag names with dedicated layout; everything else stacks vertically.
TAG_KINDS: dict[str, Kind] = {
    "table": Kind.TABLE,
    "tr": Kind.ROW,
    "td": Kind.CELL,
    "ul": Kind.UNORDERED_LIST,
    "ol": Kind.ORDERED_LIST,
    "li": Kind.LIST_ITEM,
}

_TAG_RE = re.compile(r"([^\s.#]+)(?:#([^\s.#]+))?(?:\.([^\s#]+))?")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def is_literal(value: Any) -> bool:
    return isinstance(value, str)


def parse_tag(token: Any) -> TagSpec:
    """Split a ``tag#id.class1.class2`` token into its parts.

    Raises:
        InvalidElementName: If *token* is not a string or does not match
            the shorthand grammar.
    """
    if not isinstance(token, str):
        raise InvalidElementName(token)
    match = _TAG_RE.fullmatch(token)
    if match is None:
        raise InvalidElementName(token)
    tag, id_, classes = match.groups()
    return TagSpec(tag, id_, tuple(classes.split(".")) if classes else ())


def merge_attributes(tag_attrs: dict[str, Any], map_attrs: dict[str, Any]) -> dict[str, Any]:
    """Merge explicit attributes over shorthand-derived ones.

    An explicit ``id`` wins; ``class`` values accumulate, shorthand first.
    """
    merged = {k: v for k, v in tag_attrs.items() if k != "class"}
    merged.update(map_attrs)
    derived = tag_attrs.get("class")
    explicit = map_attrs.get("class")
    if derived and explicit:
        merged["class"] = f"{derived} {explicit}"
    elif derived:
        merged["class"] = derived
    return merged


def normalize(element: Sequence[Any]) -> Element:
    """Ensure an element is of the form ``(tag, attrs, content)``.

    *content* is always a tuple, i.e. an ordered sequence of expressions.
    """
    if not element:
        raise InvalidElementName(None)
    head, *rest = element
    spec = parse_tag(head)
    tag_attrs: dict[str, Any] = {}
    if spec.id:
        tag_attrs["id"] = spec.id
    if spec.classes:
        tag_attrs["class"] = " ".join(spec.classes)

    if rest and isinstance(rest[0], dict):
        return Element(spec.tag, merge_attributes(tag_attrs, rest[0]), tuple(rest[1:]))
    return Element(spec.tag, tag_attrs, tuple(rest))


def margin(attrs: dict[str, Any], name: str) -> int:
    """Return the integer margin *name* of *attrs*; absent or ``None`` is 0."""
    return int(attrs.get(name) or 0)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def element_strategy(element: Sequence[Any]) -> Strategy:
    tag = element[0] if len(element) > 0 else None
    attrs = element[1] if len(element) > 1 else None
    if is_literal(tag) and is_literal(attrs):
        return Strategy.ALL_LITERAL
    if is_literal(tag) and isinstance(attrs, dict):
        return Strategy.LITERAL_TAG_AND_ATTRS
    if is_literal(tag):
        return Strategy.LITERAL_TAG
    return Strategy.DYNAMIC_TAG


def kind_for_tag(tag: str) -> Kind:
    return TAG_KINDS.get(tag, Kind.GENERIC)


def classify(expr: Any) -> Kind:
    """Return the :class:`Kind` the renderer should use for *expr*."""
    if expr is None:
        return Kind.EMPTY
    if isinstance(expr, list):
        if element_strategy(expr) is Strategy.DYNAMIC_TAG:
            raise InvalidElementName(expr[0] if expr else None)
        return kind_for_tag(parse_tag(expr[0]).tag)
    if isinstance(expr, (str, bytes, dict)):
        return Kind.LITERAL
    if isinstance(expr, Iterable):
        return Kind.SEQUENCE
    return Kind.LITERAL

"""Component tree building and depth-first traversal.

The traversal is a single routine parameterised by a per-node callback.
Callers choose how deep to go (default: down to the leaves) and whether a
parent is visited before or after its children.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Iterator
from typing import Any

from .models import Component, ComponentType

log = logging.getLogger(__name__)


class Order(enum.Enum):
    PRE_ORDER = "pre"
    POST_ORDER = "post"


def walk(root: Component,
         max_depth: ComponentType = ComponentType.FILE,
         order: Order = Order.PRE_ORDER) -> Iterator[Component]:
    """Yield components depth first, stopping below `max_depth`."""
    if root.type.is_deeper_than(max_depth):
        return
    if order is Order.PRE_ORDER:
        yield root
    for child in root.children:
        yield from walk(child, max_depth, order)
    if order is Order.POST_ORDER:
        yield root


def visit(root: Component,
          callback: Callable[[Component], None],
          max_depth: ComponentType = ComponentType.FILE,
          order: Order = Order.PRE_ORDER) -> int:
    """Call `callback` on every component of the tree. Returns the visit count."""
    visited = 0
    for component in walk(root, max_depth, order):
        callback(component)
        visited += 1
    log.debug("Visited %d components under %s", visited, root)
    return visited


def build_tree(d: dict[str, Any]) -> Component:
    """Build a component tree from nested dicts.

    Each node: {"uuid": ..., "key": ..., "type": "FILE", "children": [...]}.
    Component uuids must be unique across the tree.
    """
    seen: set[str] = set()

    def _build(node: dict[str, Any]) -> Component:
        uuid = str(node["uuid"])
        if uuid in seen:
            raise ValueError(f"Duplicate component uuid in tree: {uuid}")
        seen.add(uuid)
        ctype = ComponentType[node["type"]]
        children = tuple(_build(c) for c in node.get("children", []))
        if children and ctype is ComponentType.FILE:
            raise ValueError(f"File {node.get('key', uuid)} can not have children")
        for child in children:
            # directories and modules nest; nothing goes above its parent
            if ctype.is_deeper_than(child.type) or child.type is ComponentType.PROJECT:
                raise ValueError(
                    f"Component {child.key} ({child.type.name}) can not be a child "
                    f"of {node.get('key', uuid)} ({ctype.name})"
                )
        return Component(uuid=uuid, key=node.get("key", uuid), type=ctype,
                         children=children)

    return _build(d)

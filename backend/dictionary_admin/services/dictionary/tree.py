"""Tree walks over dictionary items.

Both walks use explicit stacks so deep or malformed trees cannot exhaust the
interpreter call stack. Sibling order is ascending by key (plain string
comparison, case-sensitive) and is recomputed on every walk.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional, Set

from .errors import StoreError
from .models import DictionaryItem, ItemCorrelationKey, TreeEntry

ChildrenLookup = Callable[[ItemCorrelationKey], Iterable[DictionaryItem]]


def _sort_key(item: DictionaryItem) -> str:
    return item.key


def build_children_index(
    items: Iterable[DictionaryItem],
) -> Dict[Optional[ItemCorrelationKey], List[DictionaryItem]]:
    index: Dict[Optional[ItemCorrelationKey], List[DictionaryItem]] = {}
    for item in items:
        index.setdefault(item.parent_key, []).append(item)
    for siblings in index.values():
        siblings.sort(key=_sort_key)
    return index


def walk_preorder(items: Iterable[DictionaryItem]) -> List[TreeEntry]:
    """Flatten a forest snapshot into pre-order ``TreeEntry`` rows.

    Items whose parent is missing from the snapshot are not reachable from
    any root and are left out. Items whose parent is present but which are
    still unreachable sit on a parent cycle and raise ``StoreError``.
    """
    nodes = list(items)
    index = build_children_index(nodes)

    entries: List[TreeEntry] = []
    visited: Set[ItemCorrelationKey] = set()
    stack = [(root, 0) for root in reversed(index.get(None, []))]
    while stack:
        item, depth = stack.pop()
        if item.correlation_key in visited:
            raise StoreError(f"Dictionary item {item.id} is reachable twice")
        visited.add(item.correlation_key)
        entries.append(TreeEntry(item=item, depth=depth))
        for child in reversed(index.get(item.correlation_key, [])):
            stack.append((child, depth + 1))

    known = {item.correlation_key for item in nodes}
    for item in nodes:
        if item.correlation_key not in visited and item.parent_key in known:
            raise StoreError(f"Dictionary item {item.id} is part of a parent cycle")
    return entries


def collect_descendants(
    root: DictionaryItem,
    children_of: ChildrenLookup,
) -> List[DictionaryItem]:
    """Return ``root`` and its whole subtree, every item after its descendants."""
    ordered: List[DictionaryItem] = []
    seen: Set[ItemCorrelationKey] = {root.correlation_key}
    stack = [(root, False)]
    while stack:
        item, expanded = stack.pop()
        if expanded:
            ordered.append(item)
            continue
        stack.append((item, True))
        children = sorted(children_of(item.correlation_key), key=_sort_key)
        for child in reversed(children):
            if child.correlation_key in seen:
                raise StoreError(f"Dictionary item {child.id} is part of a parent cycle")
            seen.add(child.correlation_key)
            stack.append((child, False))
    return ordered

"""
Rich-text tree walker.

Rich-text values are Lexical-style trees:

    {"root": {"children": [
        {"type": "paragraph", "children": [
            {"type": "text", "text": "Hello world"},
        ]},
    ]}}

`extract` pulls the text of every non-blank leaf, keyed by its path of
child indices from the root. `reinject` writes texts back at the same
paths on a deep copy. Both run on the same traversal, so any path from
`extract` resolves in `reinject` against a tree of the same shape.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Iterator

from autolocale.core.errors import StructuralLimitError

logger = logging.getLogger(__name__)

# Deepest child level the walker descends into (root children are level 0)
MAX_DEPTH = 8

TEXT_KIND = "text"

Path = tuple[int, ...]
TextMap = dict[Path, str]


def node_kind(node: dict[str, Any]) -> str | None:
    """Kind tag of a node. Lexical uses `type`; `kind` is accepted too."""
    return node.get("type", node.get("kind"))


def is_rich_text(value: Any) -> bool:
    """True if the value looks like a rich-text tree (has a `root` object)."""
    return isinstance(value, dict) and isinstance(value.get("root"), dict)


def _root_children(tree: Any) -> list[Any] | None:
    if not is_rich_text(tree):
        return None
    children = tree["root"].get("children")
    return children if isinstance(children, list) else None


# =============================================================================
# Traversal
# =============================================================================


def iter_text_leaves(tree: Any, max_depth: int = MAX_DEPTH) -> Iterator[tuple[Path, dict]]:
    """
    Yield (path, node) for every text leaf, depth-first, left to right.

    Each node object is visited at most once. Subtrees past `max_depth` are
    skipped and logged.
    """
    children = _root_children(tree)
    if not children:
        return
    yield from _walk(children, (), 0, max_depth, set())


def _walk(
    children: list[Any],
    path: Path,
    depth: int,
    max_depth: int,
    seen: set[int],
) -> Iterator[tuple[Path, dict]]:
    if depth > max_depth:
        raise StructuralLimitError(depth, max_depth)

    for index, node in enumerate(children):
        if not isinstance(node, dict) or id(node) in seen:
            continue
        seen.add(id(node))
        node_path = (*path, index)

        if node_kind(node) == TEXT_KIND and isinstance(node.get("text"), str):
            yield node_path, node
            continue

        grandchildren = node.get("children")
        if not isinstance(grandchildren, list) or not grandchildren:
            continue

        try:
            yield from _walk(grandchildren, node_path, depth + 1, max_depth, seen)
        except StructuralLimitError as e:
            logger.warning(f"Rich-text subtree at {list(node_path)} left untranslated: {e}")


# =============================================================================
# Extract / reinject
# =============================================================================


def extract(tree: Any, max_depth: int = MAX_DEPTH) -> TextMap:
    """
    Collect translatable leaf texts keyed by path.

    Blank leaves are skipped, so they are never sent for translation and
    never overwritten. Insertion order follows the traversal.
    """
    return {
        path: node["text"]
        for path, node in iter_text_leaves(tree, max_depth)
        if node["text"].strip()
    }


def reinject(tree: Any, mapping: TextMap, max_depth: int = MAX_DEPTH) -> Any:
    """
    Return a deep copy of `tree` with leaf texts replaced from `mapping`.

    Paths absent from the mapping keep their text, blank leaves are never
    overwritten, and the input is never mutated.
    """
    result = copy.deepcopy(tree)
    if not mapping:
        return result

    for path, node in iter_text_leaves(result, max_depth):
        if path in mapping and node["text"].strip():
            node["text"] = mapping[path]
    return result


def has_text(tree: Any, max_depth: int = MAX_DEPTH) -> bool:
    """True if the tree holds at least one non-blank text leaf."""
    return any(node["text"].strip() for _, node in iter_text_leaves(tree, max_depth))


def to_dot_paths(mapping: TextMap, prefix: str = "") -> dict[str, str]:
    """
    Render paths as dot-joined keys ("content.root.children.0.children.1.text").

    Diagnostic format only; translation always merges structurally.
    """
    rendered: dict[str, str] = {}
    for path, text in mapping.items():
        parts = [prefix, "root"] if prefix else ["root"]
        for index in path:
            parts.extend(["children", str(index)])
        parts.append("text")
        rendered[".".join(parts)] = text
    return rendered

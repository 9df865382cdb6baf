"""
Tests for the rich-text tree walker.
"""

import copy

from autolocale.i18n.richtext import (
    MAX_DEPTH,
    extract,
    has_text,
    is_rich_text,
    reinject,
    to_dot_paths,
)


def nested(depth, text="deep text"):
    """A tree whose only text leaf sits `depth` child levels below the root."""
    node = {"type": "text", "text": text}
    for _ in range(depth):
        node = {"type": "paragraph", "children": [node]}
    return {"root": {"children": [node]}}


def texts_of(tree):
    return list(extract(tree).values())


# =============================================================================
# Extract
# =============================================================================


class TestExtract:
    def test_paths_follow_child_indices(self, rich_content):
        mapping = extract(rich_content)

        assert mapping == {
            (0, 0): "Hello world",
            (1, 0): "First paragraph",
            (1, 2): "bold part",
        }

    def test_order_is_depth_first_left_to_right(self, rich_content):
        assert texts_of(rich_content) == ["Hello world", "First paragraph", "bold part"]

    def test_blank_leaves_skipped(self, rich_content):
        assert (1, 1) not in extract(rich_content)

    def test_non_text_nodes_ignored(self, rich_content):
        assert (1, 3) not in extract(rich_content)

    def test_idempotent(self, rich_content):
        assert extract(rich_content) == extract(rich_content)

    def test_does_not_mutate(self, rich_content):
        before = copy.deepcopy(rich_content)
        extract(rich_content)
        assert rich_content == before

    def test_no_root_is_empty(self):
        assert extract({"children": [{"type": "text", "text": "x"}]}) == {}
        assert extract("plain string") == {}
        assert extract(None) == {}

    def test_root_without_children_is_empty(self):
        assert extract({"root": {}}) == {}
        assert extract({"root": {"children": []}}) == {}

    def test_kind_key_accepted(self):
        tree = {"root": {"children": [{"kind": "text", "text": "Salut"}]}}
        assert extract(tree) == {(0,): "Salut"}

    def test_shared_node_visited_once(self):
        shared = {"type": "text", "text": "once"}
        tree = {"root": {"children": [
            {"type": "paragraph", "children": [shared]},
            {"type": "paragraph", "children": [shared]},
        ]}}

        assert texts_of(tree) == ["once"]


# =============================================================================
# Reinject
# =============================================================================


class TestReinject:
    def test_round_trip_identity(self, rich_content):
        assert reinject(rich_content, extract(rich_content)) == rich_content

    def test_shape_preserved(self, rich_content):
        translated = {path: text.upper() for path, text in extract(rich_content).items()}
        result = reinject(rich_content, translated)

        assert result["root"]["children"][0]["tag"] == "h2"
        assert result["root"]["children"][1]["children"][2]["format"] == 1
        assert result["root"]["children"][1]["children"][3] == {"type": "linebreak"}
        assert texts_of(result) == ["HELLO WORLD", "FIRST PARAGRAPH", "BOLD PART"]

    def test_input_not_mutated(self, rich_content):
        before = copy.deepcopy(rich_content)
        reinject(rich_content, {(0, 0): "Bonjour le monde"})
        assert rich_content == before

    def test_partial_mapping(self, rich_content):
        result = reinject(rich_content, {(1, 2): "partie en gras"})

        assert texts_of(result) == ["Hello world", "First paragraph", "partie en gras"]

    def test_blank_leaf_never_overwritten(self, rich_content):
        result = reinject(rich_content, {(1, 1): "should not land"})
        assert result["root"]["children"][1]["children"][1]["text"] == "   "

    def test_unknown_paths_ignored(self, rich_content):
        result = reinject(rich_content, {(9, 9): "nowhere"})
        assert result == rich_content

    def test_empty_mapping_returns_copy(self, rich_content):
        result = reinject(rich_content, {})
        assert result == rich_content
        assert result is not rich_content


# =============================================================================
# Depth ceiling
# =============================================================================


class TestDepthCeiling:
    def test_leaf_at_ceiling_extracted(self):
        assert texts_of(nested(MAX_DEPTH)) == ["deep text"]

    def test_leaf_past_ceiling_skipped(self):
        assert texts_of(nested(MAX_DEPTH + 1)) == []

    def test_walk_continues_after_deep_subtree(self):
        deep = nested(MAX_DEPTH + 3)["root"]["children"][0]
        tree = {"root": {"children": [
            deep,
            {"type": "paragraph", "children": [{"type": "text", "text": "shallow"}]},
        ]}}

        assert extract(tree) == {(1, 0): "shallow"}

    def test_deep_subtree_unchanged_by_reinject(self):
        tree = nested(MAX_DEPTH + 1)
        assert reinject(tree, {(0,) * (MAX_DEPTH + 2): "x"}) == tree

    def test_custom_ceiling(self):
        assert texts_of(nested(2)) == ["deep text"]
        assert extract(nested(2), max_depth=1) == {}


# =============================================================================
# Helpers
# =============================================================================


class TestHelpers:
    def test_is_rich_text(self, rich_content):
        assert is_rich_text(rich_content)
        assert not is_rich_text({"root": "nope"})
        assert not is_rich_text("Hello")
        assert not is_rich_text({"en": "Hello", "fr": "Bonjour"})

    def test_has_text(self, rich_content):
        assert has_text(rich_content)
        assert not has_text({"root": {"children": [{"type": "text", "text": "  "}]}})

    def test_dot_paths(self):
        rendered = to_dot_paths({(0, 1): "a", (2,): "b"}, prefix="content")

        assert rendered == {
            "content.root.children.0.children.1.text": "a",
            "content.root.children.2.text": "b",
        }

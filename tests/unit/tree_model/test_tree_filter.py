from __future__ import annotations

import unittest

from cwdtree.tree_model.build import build_tree, iter_nodes
from cwdtree.tree_model.filtering import VisibleRow, expansion_for_matches, filter_tree, visible_rows
from cwdtree.tree_model.rendering import format_git_status_badges, format_row, highlight_substring

from session_fakes import entry

ENTRIES = [
    entry("/r/src", True),
    entry("/r/src/pkg", True),
    entry("/r/src/pkg/mod.py"),
    entry("/r/src/main.py"),
    entry("/r/docs", True),
    entry("/r/docs/guide.md"),
    entry("/r/README.md"),
]


class FilterTreeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.forest = build_tree(ENTRIES, "/r")

    def test_empty_or_missing_matches_return_input_unchanged(self) -> None:
        self.assertIs(filter_tree(self.forest, None), self.forest)
        self.assertEqual(filter_tree(self.forest, set()), self.forest)

    def test_retains_only_matches_and_their_ancestors(self) -> None:
        matches = {"/r/src/pkg/mod.py"}

        pruned = filter_tree(self.forest, matches)

        self.assertEqual([node.path for node in iter_nodes(pruned)], ["/r/src", "/r/src/pkg", "/r/src/pkg/mod.py"])
        for node in iter_nodes(pruned):
            below = {child.path for child in iter_nodes([node])}
            self.assertTrue(below & matches)

    def test_preserves_sibling_order(self) -> None:
        pruned = filter_tree(self.forest, {"/r/README.md", "/r/docs/guide.md", "/r/src/main.py"})
        self.assertEqual([node.path for node in pruned], ["/r/docs", "/r/src", "/r/README.md"])

    def test_matching_directory_is_kept_without_unmatched_children(self) -> None:
        (docs,) = filter_tree(self.forest, {"/r/docs"})
        self.assertEqual(docs.path, "/r/docs")
        self.assertEqual(docs.children, ())


class ExpansionTests(unittest.TestCase):
    def test_expansion_unions_ancestors_and_matching_directories(self) -> None:
        expanded = expansion_for_matches(
            ["/r/src/pkg/mod.py", "/r/docs"],
            {"/r/src", "/r/src/pkg", "/r/docs"},
            "/r",
        )
        self.assertEqual(expanded, frozenset({"/r/src/pkg", "/r/src", "/r", "/r/docs"}))

    def test_visible_rows_descend_only_into_expanded_directories(self) -> None:
        forest = build_tree(ENTRIES, "/r")

        rows = visible_rows(forest, {"/r/src"})

        self.assertEqual(
            [(row.node.name, row.depth, row.expanded) for row in rows],
            [
                ("docs", 0, False),
                ("src", 0, True),
                ("pkg", 1, False),
                ("main.py", 1, False),
                ("README.md", 0, False),
            ],
        )


class RenderingTests(unittest.TestCase):
    def test_format_row_shows_marker_selection_and_badges(self) -> None:
        (src,) = [node for node in build_tree(ENTRIES, "/r") if node.name == "src"]
        row = VisibleRow(node=src, depth=1, expanded=True)

        text = format_row(row, {"/r/src": 3}, search_query="sr", selection={"/r/src": "use-as-example"})

        self.assertEqual(text, "  ▾ [E] [sr]c/ [M][?]")

    def test_badges_and_highlight_are_empty_without_data(self) -> None:
        self.assertEqual(format_git_status_badges("/r/x", None), "")
        self.assertEqual(highlight_substring("main.py", ""), "main.py")
        self.assertEqual(highlight_substring("main.py", "zzz"), "main.py")


if __name__ == "__main__":
    unittest.main()

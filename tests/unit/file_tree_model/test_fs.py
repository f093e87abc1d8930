from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path

from cwdtree.file_tree_model.fs import list_directory_entries, walk_directory_entries


class DirectoryScanTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _touch(self, relative: str) -> None:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("x", encoding="utf-8")

    def test_list_directory_entries_sorts_directories_first_case_insensitive(self) -> None:
        self._touch("b.txt")
        self._touch("A.txt")
        (self.root / "zdir").mkdir()
        (self.root / "Adir").mkdir()

        entries = list_directory_entries(str(self.root))

        self.assertEqual([entry.name for entry in entries], ["Adir", "zdir", "A.txt", "b.txt"])
        self.assertTrue(all(entry.parent_path == str(self.root) for entry in entries))
        self.assertTrue(all(entry.depth == 1 for entry in entries))

    def test_list_directory_entries_raises_for_missing_directory(self) -> None:
        with self.assertRaises(OSError):
            list_directory_entries(str(self.root / "missing"))

    def test_walk_skips_ignored_directories_and_symlinks(self) -> None:
        self._touch("src/main.py")
        self._touch("node_modules/pkg/index.js")
        self._touch(".git/HEAD")
        os.symlink(self.root / "src", self.root / "link")

        paths = [entry.path for entry in walk_directory_entries(str(self.root))]

        self.assertEqual(paths, [str(self.root / "src"), str(self.root / "src" / "main.py")])

    def test_walk_reports_parent_and_depth_relative_to_root(self) -> None:
        self._touch("a/b/c.txt")

        entries = walk_directory_entries(str(self.root))

        by_name = {entry.name: entry for entry in entries}
        self.assertEqual(by_name["a"].depth, 1)
        self.assertEqual(by_name["b"].parent_path, str(self.root / "a"))
        self.assertEqual(by_name["c.txt"].depth, 3)

    def test_walk_respects_depth_bound(self) -> None:
        self._touch("a/b/c.txt")

        names = [entry.name for entry in walk_directory_entries(str(self.root), max_depth=2)]

        self.assertEqual(names, ["a", "b"])

    def test_walk_truncates_at_entry_bound_without_error(self) -> None:
        for idx in range(5):
            self._touch(f"file{idx}.txt")

        with self.assertLogs("cwdtree.file_tree_model.fs", level="WARNING"):
            entries = walk_directory_entries(str(self.root), max_entries=3)

        self.assertEqual(len(entries), 3)

    def test_walk_raises_for_unreadable_root(self) -> None:
        with self.assertRaises(OSError):
            walk_directory_entries(str(self.root / "missing"))


if __name__ == "__main__":
    unittest.main()

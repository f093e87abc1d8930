from __future__ import annotations

import argparse
import io
import os
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest import mock

from cwdtree import cli
from cwdtree.errors import TruncationNotice
from cwdtree.state import SidebarSnapshot, SidebarStatus, ViewMode
from cwdtree.tree_model.build import build_tree
from cwdtree.tree_model.filtering import visible_rows

from session_fakes import entry


class CliParserTests(unittest.TestCase):
    def test_positive_int_rejects_zero_and_text(self) -> None:
        self.assertEqual(cli._positive_int("3"), 3)
        with self.assertRaises(argparse.ArgumentTypeError):
            cli._positive_int("0")
        with self.assertRaises(argparse.ArgumentTypeError):
            cli._positive_int("many")

    def test_parser_defaults(self) -> None:
        args = cli.build_parser().parse_args([])
        self.assertIsNone(args.pid)
        self.assertIsNone(args.mode)
        self.assertFalse(args.watch)

    def test_mode_flags_are_mutually_exclusive(self) -> None:
        self.assertEqual(cli.build_parser().parse_args(["--tree"]).mode, "tree")
        with redirect_stdout(io.StringIO()), mock.patch("sys.stderr", io.StringIO()):
            with self.assertRaises(SystemExit):
                cli.build_parser().parse_args(["--tree", "--flat"])


class RenderSnapshotTests(unittest.TestCase):
    def test_render_ready_tree_with_notice(self) -> None:
        forest = build_tree([entry("/r/a", True), entry("/r/a/x.txt"), entry("/r/b.txt")], "/r")
        snapshot = SidebarSnapshot(
            mode=ViewMode.TREE,
            status=SidebarStatus.READY,
            session_id="0123456789",
            current_path="/r",
            tree=tuple(forest),
            rows=tuple(visible_rows(forest, {"/r/a"})),
            truncation=TruncationNotice(root="/r", max_entries=3, max_depth=10),
        )

        self.assertEqual(
            cli.render_snapshot(snapshot),
            "AGENT MODE  Session: 01234567  /r\n"
            "Listing of /r truncated at 3 entries\n"
            "▾ a/\n"
            "    x.txt\n"
            "  b.txt\n",
        )

    def test_render_error_state(self) -> None:
        snapshot = SidebarSnapshot(mode=ViewMode.FLAT, status=SidebarStatus.ERROR, error="permission denied")
        self.assertEqual(
            cli.render_snapshot(snapshot),
            "NAVIGATION MODE  No session  Error loading directory\npermission denied\n",
        )


class CliMainTests(unittest.TestCase):
    @unittest.skipUnless(sys.platform.startswith("linux"), "/proc is Linux-only")
    def test_main_prints_flat_listing_of_followed_process(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "pkg").mkdir()
            (root / "notes.txt").write_text("hi", encoding="utf-8")
            previous = os.getcwd()
            out = io.StringIO()
            os.chdir(root)
            try:
                with mock.patch("cwdtree.runtime.config.CONFIG_PATH", root / "config.json"), redirect_stdout(out):
                    cli.main(["--pid", str(os.getpid()), "--flat"])
            finally:
                os.chdir(previous)

        lines = out.getvalue().splitlines()
        self.assertTrue(lines[0].startswith("NAVIGATION MODE  Session: "))
        self.assertTrue(lines[0].endswith(str(root)))
        self.assertEqual(lines[1:], ["▸ pkg/", "  notes.txt"])

    def test_search_requires_tree_mode(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch("cwdtree.runtime.config.CONFIG_PATH", Path(tmp) / "config.json"):
                with self.assertRaises(SystemExit):
                    cli.main(["--pid", str(os.getpid()), "--flat", "--search", "x"])


if __name__ == "__main__":
    unittest.main()

from __future__ import annotations

import asyncio
import unittest

from cwdtree.analysis.cache import AnalysisCache
from cwdtree.analysis.symbols import SourceReport, analyze_source, collect_symbols_regex, language_for_path

from session_fakes import FakeBackend

PYTHON_SOURCE = """import os
from pathlib import Path


class Loader:
    def load(self):
        return Path(os.getcwd())


async def main():
    pass
"""


class SymbolAnalysisTests(unittest.TestCase):
    def test_language_for_path_uses_suffix_table(self) -> None:
        self.assertEqual(language_for_path("/p/mod.py"), "python")
        self.assertEqual(language_for_path("/p/App.TSX"), "tsx")

    def test_regex_collects_imports_classes_and_functions(self) -> None:
        symbols = collect_symbols_regex(PYTHON_SOURCE, "python")

        self.assertEqual(
            [(symbol.kind, symbol.name, symbol.line) for symbol in symbols],
            [
                ("import", "import os", 0),
                ("import", "from pathlib import Path", 1),
                ("class", "Loader", 4),
                ("fn", "load", 5),
                ("fn", "main", 9),
            ],
        )

    def test_analyze_source_reports_symbols_for_known_language(self) -> None:
        report = analyze_source(PYTHON_SOURCE, "/p/loader.py")

        self.assertEqual(report.language, "python")
        self.assertEqual(report.line_count, 11)
        self.assertIn(report.parser, ("tree-sitter", "regex"))
        self.assertEqual([symbol.name for symbol in report.classes], ["Loader"])
        self.assertEqual({symbol.name for symbol in report.functions}, {"load", "main"})

    def test_unknown_language_reports_no_symbols(self) -> None:
        report = analyze_source("just words\n", "/p/notes.unknownext")
        self.assertEqual(report.symbols, ())
        self.assertIsNone(report.parser)

    def test_binary_content_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            analyze_source("\x00\x01", "/p/blob.py")


class AnalysisCacheTests(unittest.IsolatedAsyncioTestCase):
    async def test_first_analyze_fetches_and_expands(self) -> None:
        backend = FakeBackend()
        backend.add("/p/loader.py", PYTHON_SOURCE)
        cache = AnalysisCache(backend)

        entry = await cache.analyze("/p/loader.py")

        assert entry is not None
        self.assertIsInstance(entry.report, SourceReport)
        self.assertTrue(entry.expanded)
        self.assertTrue(cache.is_expanded("/p/loader.py"))

    async def test_second_analyze_only_toggles_expansion(self) -> None:
        backend = FakeBackend()
        backend.add("/p/a.py", "x = 1\n")
        calls: list[str] = []

        def analyzer(text: str, path: str) -> str:
            calls.append(path)
            return "report"

        cache = AnalysisCache(backend, analyzer)
        await cache.analyze("/p/a.py")
        toggled = await cache.analyze("/p/a.py")
        again = await cache.analyze("/p/a.py")

        assert toggled is not None and again is not None
        self.assertFalse(toggled.expanded)
        self.assertTrue(again.expanded)
        self.assertEqual(calls, ["/p/a.py"])
        self.assertEqual([call for call in backend.calls if call[0] == "read"], [("read", "/p/a.py")])

    async def test_read_failure_stores_error_marker_for_that_path_only(self) -> None:
        backend = FakeBackend()
        backend.add("/p/ok.py", "x = 1\n")
        cache = AnalysisCache(backend, lambda text, path: "report")

        with self.assertLogs("cwdtree.analysis.cache", level="WARNING"):
            failed = await cache.analyze("/p/missing.py")
        ok = await cache.analyze("/p/ok.py")

        assert failed is not None and ok is not None
        self.assertTrue(failed.failed)
        assert failed.error is not None
        self.assertEqual(failed.error.path, "/p/missing.py")
        self.assertFalse(ok.failed)
        self.assertEqual(set(cache.entries()), {"/p/missing.py", "/p/ok.py"})

    async def test_analyzer_exception_becomes_error_marker(self) -> None:
        backend = FakeBackend()
        backend.add("/p/a.py", "x")

        def analyzer(text: str, path: str) -> str:
            raise RuntimeError("parser crashed")

        cache = AnalysisCache(backend, analyzer)
        with self.assertLogs("cwdtree.analysis.cache", level="WARNING"):
            entry = await cache.analyze("/p/a.py")

        assert entry is not None and entry.error is not None
        self.assertIn("parser crashed", entry.error.message)

    async def test_concurrent_analyze_of_in_flight_path_is_noop(self) -> None:
        backend = FakeBackend()
        backend.add("/p/a.py", "x")
        gate = backend.block("/p/a.py")
        cache = AnalysisCache(backend, lambda text, path: "report")

        first = asyncio.create_task(cache.analyze("/p/a.py"))
        await asyncio.sleep(0)
        self.assertTrue(cache.is_pending("/p/a.py"))
        second = await cache.analyze("/p/a.py")
        gate.set()
        entry = await first

        self.assertIsNone(second)
        assert entry is not None
        self.assertEqual(entry.report, "report")
        self.assertEqual(len(cache), 1)
        self.assertFalse(cache.is_pending("/p/a.py"))


if __name__ == "__main__":
    unittest.main()

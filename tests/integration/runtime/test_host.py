from __future__ import annotations

import os
import sys
import tempfile
import unittest
from pathlib import Path

from cwdtree.errors import SessionError
from cwdtree.host import LocalBackend, SessionBackend, read_process_cwd


class LocalBackendTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        self.backend = LocalBackend()

    async def asyncTearDown(self) -> None:
        self._tmp.cleanup()

    def test_local_backend_satisfies_protocol(self) -> None:
        self.assertIsInstance(self.backend, SessionBackend)

    async def test_list_directory_and_recursive_walk(self) -> None:
        (self.root / "pkg").mkdir()
        (self.root / "pkg" / "mod.py").write_text("x = 1\n", encoding="utf-8")
        (self.root / "top.txt").write_text("hi", encoding="utf-8")

        flat = await self.backend.list_directory(str(self.root))
        walked = await self.backend.list_directory_recursive(str(self.root), 10, 100)

        self.assertEqual([entry.name for entry in flat], ["pkg", "top.txt"])
        self.assertEqual([entry.name for entry in walked], ["pkg", "mod.py", "top.txt"])

    async def test_read_file_content_falls_back_to_latin1(self) -> None:
        path = self.root / "legacy.txt"
        path.write_bytes(b"caf\xe9")

        self.assertEqual(await self.backend.read_file_content(str(path)), "café")

    async def test_read_file_content_strips_utf8_bom(self) -> None:
        path = self.root / "bom.py"
        path.write_bytes(b"\xef\xbb\xbfx = 1\n")

        self.assertEqual(await self.backend.read_file_content(str(path)), "x = 1\n")

    async def test_read_missing_file_raises_os_error(self) -> None:
        with self.assertRaises(OSError):
            await self.backend.read_file_content(str(self.root / "missing.txt"))

    async def test_unknown_session_raises_session_error(self) -> None:
        with self.assertRaises(SessionError):
            await self.backend.get_working_directory("nope")
        with self.assertRaises(SessionError):
            self.backend.close("nope")

    async def test_attached_session_does_not_accept_input(self) -> None:
        session_id = self.backend.attach(os.getpid())
        with self.assertRaises(SessionError):
            await self.backend.send_input(session_id, "ls\n")

    @unittest.skipUnless(sys.platform.startswith("linux"), "/proc is Linux-only")
    async def test_attached_session_reports_process_cwd(self) -> None:
        session_id = self.backend.attach(os.getpid())
        self.assertEqual(await self.backend.get_working_directory(session_id), os.path.realpath(os.getcwd()))

    @unittest.skipUnless(sys.platform.startswith("linux"), "/proc is Linux-only")
    async def test_spawned_shell_follows_cd_and_accepts_input(self) -> None:
        session_id = self.backend.spawn_shell("/bin/sh", cwd=str(self.root))
        try:
            self.assertEqual(await self.backend.get_working_directory(session_id), str(self.root))
            await self.backend.send_input(session_id, "true\n")
        finally:
            self.backend.close(session_id)


class ReadProcessCwdTests(unittest.TestCase):
    @unittest.skipUnless(sys.platform.startswith("linux"), "/proc is Linux-only")
    def test_missing_process_raises_session_error(self) -> None:
        with self.assertRaises(SessionError):
            read_process_cwd(2**22 + 12345)


if __name__ == "__main__":
    unittest.main()

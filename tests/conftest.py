"""Pytest bootstrap for local source imports.

The ``pytest`` console script can run with a sys.path that excludes the
repository root. Ensure ``import cwdtree`` resolves to the local package and
that nested test modules can import the shared ``session_fakes`` helpers.
"""

from __future__ import annotations

import sys
from pathlib import Path


TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent

for import_root in (str(PROJECT_ROOT), str(TESTS_DIR)):
    if import_root not in sys.path:
        sys.path.insert(0, import_root)

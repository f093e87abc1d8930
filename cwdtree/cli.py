"""Command-line front door for cwdtree.

Attaches to a process, follows its working directory, and prints the flat
or tree view. With ``--watch`` the view is reprinted whenever the process
changes directory.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import os
import sys

from .host import LocalBackend
from .runtime.config import load_settings
from .runtime.coordinator import ViewCoordinator
from .state import SidebarSnapshot, SidebarStatus, ViewMode
from .tree_model.rendering import format_rows

SETTLED_STATUSES = (SidebarStatus.READY, SidebarStatus.ERROR, SidebarStatus.NO_SESSION)


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Show the directory a terminal process is working in, as a listing or a tree."
    )
    parser.add_argument(
        "--pid",
        type=_positive_int,
        default=None,
        help="Process to follow (default: the parent shell).",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--tree", action="store_const", const="tree", dest="mode", help="Show the recursive tree.")
    mode.add_argument("--flat", action="store_const", const="flat", dest="mode", help="Show one directory level.")
    parser.add_argument("--search", metavar="QUERY", default=None, help="Filter the tree to QUERY matches.")
    parser.add_argument("--expand-all", action="store_true", help="Expand every directory in tree mode.")
    parser.add_argument("--git-changes", action="store_true", help="Only show paths with git changes.")
    parser.add_argument("--watch", action="store_true", help="Reprint whenever the working directory changes.")
    parser.add_argument("--max-depth", type=_positive_int, default=None, help="Recursive listing depth bound.")
    parser.add_argument("--max-entries", type=_positive_int, default=None, help="Recursive listing entry bound.")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log refreshes and warnings.")
    verbosity.add_argument("--debug", action="store_true", help="Log everything.")
    return parser


def configure_logging(verbose: bool, debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def render_snapshot(snapshot: SidebarSnapshot, selection: dict[str, str] | None = None) -> str:
    """Render a header line plus one line per visible row."""
    lines = [f"{snapshot.mode_label}  {snapshot.session_label}  {snapshot.path_label}"]
    if snapshot.status is SidebarStatus.ERROR:
        lines.append(snapshot.error or "")
    elif snapshot.status is SidebarStatus.READY:
        if snapshot.truncation is not None:
            lines.append(snapshot.truncation.message())
        if snapshot.matches is not None and not snapshot.matches:
            lines.append("No matches")
        lines.extend(format_rows(snapshot.rows, snapshot.git_status_overlay, snapshot.query, selection))
    return "\n".join(lines) + "\n"


async def run(args: argparse.Namespace) -> None:
    settings = load_settings()
    overrides: dict[str, int] = {}
    if args.max_depth is not None:
        overrides["max_depth"] = args.max_depth
    if args.max_entries is not None:
        overrides["max_entries"] = args.max_entries
    if overrides:
        settings = dataclasses.replace(settings, **overrides)

    backend = LocalBackend()
    session_id = backend.attach(args.pid if args.pid is not None else os.getppid())
    coordinator = ViewCoordinator(backend, settings, persist_mode=True)
    if args.mode is not None:
        await coordinator.switch_mode(args.mode)
    if coordinator.mode is not ViewMode.TREE and (args.search or args.expand_all or args.git_changes):
        raise SystemExit("--search, --expand-all and --git-changes need tree mode (--tree).")

    await coordinator.set_session(session_id)
    await coordinator.open_sidebar()
    try:
        if args.git_changes:
            await coordinator.toggle_git_changes_only()
        if args.expand_all:
            coordinator.expand_all()
        if args.search:
            coordinator.apply_search(args.search)
        sys.stdout.write(render_snapshot(coordinator.snapshot))
        sys.stdout.flush()
        if not args.watch:
            return

        last_path = coordinator.current_path

        def reprint(snapshot: SidebarSnapshot) -> None:
            nonlocal last_path
            if snapshot.status not in SETTLED_STATUSES or snapshot.current_path == last_path:
                return
            last_path = snapshot.current_path
            sys.stdout.write("\n" + render_snapshot(snapshot))
            sys.stdout.flush()

        coordinator.on_update = reprint
        while True:
            await asyncio.sleep(settings.poll_interval)
    finally:
        coordinator.close_sidebar()


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and print the view of the followed process's CWD."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose, args.debug)
    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()

"""
Command-line entry point for inspecting and editing a stored session.
"""

import argparse
import logging
import sys
from typing import List, Optional, TextIO

from .editor.data_model import BlockKind, PageLayout
from .editor.persistence import KeyValueStore, QSettingsStore
from .editor.session import SessionController
from .editor.validation import validate_layout

logger = logging.getLogger(__name__)

COMMANDS = ("show", "sample", "clear", "undo", "redo", "add-text", "add-image")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blockgrid",
        description="Inspect or edit the stored block grid session.",
    )
    parser.add_argument("commands", nargs="*", metavar="command",
                        help=f"one or more of: {', '.join(COMMANDS)} (default: show)")
    parser.add_argument("--settings-file", metavar="PATH",
                        help="INI file to use instead of the native settings store")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="enable debug logging")
    return parser


def format_layout(layout: PageLayout) -> List[str]:
    """Describe a layout row by row, in spatial order."""
    if layout.is_empty:
        return ["Layout: empty"]

    lines = [f"Layout: {len(layout)} blocks, {layout.row_count} rows"]
    for block in layout.spatial_order():
        lines.append(
            f"  row {block.position.y}: [{block.kind.value:<5} "
            f"{block.position.x:>2}-{block.right_edge - 1:<2}] {block.id}"
        )
    for issue in validate_layout(layout).issues:
        if issue.is_warning or issue.is_error:
            lines.append(f"  ! {issue.message}")
    return lines


def run(argv: Optional[List[str]] = None, store: Optional[KeyValueStore] = None,
        out: Optional[TextIO] = None) -> int:
    """Apply commands to the stored session and print a summary.

    Returns:
        Process exit code.
    """
    out = out or sys.stdout
    parser = build_parser()
    args = parser.parse_args(argv)
    unknown = [c for c in args.commands if c not in COMMANDS]
    if unknown:
        parser.error(f"unknown command: {unknown[0]}")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    if store is None:
        if args.settings_file:
            store = QSettingsStore.from_file(args.settings_file)
        else:
            store = QSettingsStore()

    session = SessionController.from_store(store)

    for command in args.commands or ["show"]:
        if command == "sample":
            session.load_sample()
        elif command == "clear":
            session.clear_all()
        elif command == "undo":
            if not session.undo():
                print("Nothing to undo", file=out)
        elif command == "redo":
            if not session.redo():
                print("Nothing to redo", file=out)
        elif command == "add-text":
            session.add_block(BlockKind.TEXT)
        elif command == "add-image":
            session.add_block(BlockKind.IMAGE)
        logger.debug("Applied %s", command)

    session.flush()
    for line in format_layout(session.layout):
        print(line, file=out)

    history = session.history
    print(
        f"History: {len(history)} snapshots, cursor {history.cursor}, "
        f"undo: {'yes' if history.can_undo else 'no'}, "
        f"redo: {'yes' if history.can_redo else 'no'}",
        file=out,
    )
    return 0

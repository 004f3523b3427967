"""
upm remove command (-R).

Mark files for uninstall, or with --purge for removal from their update site.
"""

import sys
from typing import Any

from upkeep.core.records import Action
from upm.commands.common import open_session, require_file, save


def remove_command(args: Any) -> int:
    """
    Execute remove command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    if not args.targets:
        print("Error: No targets specified", file=sys.stderr)
        print("Usage: upm -R [--purge] <file>...", file=sys.stderr)
        return 1

    session = open_session(args)
    action = Action.REMOVE if args.purge else Action.UNINSTALL

    for target in args.targets:
        record = require_file(session.files, target)
        session.files.set_action(record, action)
        if args.verbose:
            print(f"Marked {target} for {action}")

    save(session)
    return 0

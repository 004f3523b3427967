"""
upm sync command (-S).

Mark files for install or update, together with the files they require.
"""

import sys
from typing import Any

from upkeep.core.collection import FilesCollection
from upkeep.core.records import Action, FileRecord
from upm.cli import UPMError
from upm.commands.common import open_session, require_file, save

_INSTALL_ACTIONS = (Action.INSTALL, Action.UPDATE)


def sync_command(args: Any) -> int:
    """
    Execute sync command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    if not args.targets:
        print("Error: No targets specified", file=sys.stderr)
        print("Usage: upm -S <file>...", file=sys.stderr)
        return 1

    session = open_session(args)
    files = session.files

    for target in args.targets:
        record = require_file(files, target)
        if not mark_installable(files, record):
            raise UPMError(f"{target} cannot be installed (status: {record.status})")
        if args.verbose:
            print(f"Marked {target} for {record.action}")

    # files required by the new selection
    for dependency, dependents in files.get_dependencies().items():
        if dependency.has_default_action() and mark_installable(files, dependency):
            names = ", ".join(str(dependent) for dependent in dependents)
            print(f"Also marking {dependency} for {dependency.action} (required by {names})")

    save(session)
    return 0


def mark_installable(files: FilesCollection, record: FileRecord) -> bool:
    """Queue the first of install/update the file allows; True if one did."""
    actions = files.get_actions(record)
    for action in _INSTALL_ACTIONS:
        if action in actions:
            files.set_action(record, action)
            return True
    return False

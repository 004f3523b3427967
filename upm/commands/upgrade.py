"""
upm upgrade command (-U).

Mark every available update.
"""

from typing import Any

from upm.commands.common import open_session, save


def upgrade_command(args: Any) -> int:
    """
    Execute upgrade command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    session = open_session(args)
    files = session.files

    marked = files.mark_for_update(even_forced=args.force)
    print(f"{marked} file(s) marked for update")
    if not args.force and files.has_forcable_updates():
        print("Locally modified files were left alone; use --force to overwrite them")

    save(session)
    return 0

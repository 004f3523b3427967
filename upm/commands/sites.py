"""
upm sites command (--sites).

List, add, rename and remove update sites.
"""

from typing import Any

from upm.cli import UPMError
from upm.commands.common import open_session, save

_USAGE = {
    "add": "upm --sites add <name> <url> [upload-target]",
    "rename": "upm --sites rename <old> <new>",
    "remove": "upm --sites remove <name>",
}


def sites_command(args: Any) -> int:
    """
    Execute sites command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    session = open_session(args)
    files = session.files

    if not args.targets:
        for site in files.sites:
            marker = " (uploadable)" if site.is_uploadable else ""
            print(f"{site.name:<16} {site.url}{marker}")
        return 0

    command, *params = args.targets
    if command not in _USAGE:
        raise UPMError(f"Unknown sites command: {command}")

    if command == "add" and len(params) in (2, 3):
        name, url, *upload = params
        if name in files.sites:
            raise UPMError(f"Update site {name} exists already")
        files.sites.add(name, url, upload_target=upload[0] if upload else None)
    elif command == "rename" and len(params) == 2:
        files.rename_update_site(params[0], params[1])
    elif command == "remove" and len(params) == 1:
        # the database may only name registered sites
        remaining = files.for_update_site(params[0]).count()
        if remaining:
            raise UPMError(f"Update site {params[0]} still has {remaining} file(s)")
        files.remove_update_site(params[0])
    else:
        raise UPMError(f"Usage: {_USAGE[command]}")

    save(session)
    return 0

"""
upm query command (-Q).

List, search and describe tracked files.
"""

from typing import Any

from upkeep.core.collection import FilesCollection
from upkeep.core.filters import search
from upkeep.core.records import FileRecord
from upkeep.errors import MissingUpdateSiteError
from upm.commands.common import format_record, open_session, require_file


def query_command(args: Any) -> int:
    """
    Execute query command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    session = open_session(args)
    files = session.files

    if args.info:
        for target in args.targets:
            print_info(files, require_file(files, target))
        return 0

    files.sort()
    if args.search:
        records = list(files)
        for keyword in args.targets:
            records = list(search(keyword, records))
    elif args.list:
        records = list(files)
    else:
        records = list(files.shown_by_default())

    if not records:
        print("Nothing to show")
        return 0
    for record in records:
        print(format_record(record))
    return 0


def print_info(files: FilesCollection, record: FileRecord) -> None:
    """Print everything known about one file."""
    print(f"Name            : {record.filename}")
    print(f"Update site     : {record.update_site or '(none)'}")
    print(f"Status          : {record.status}")
    print(f"Action          : {record.action}")
    actions = files.get_actions(record)
    print(f"Actions         : {', '.join(map(str, actions)) or '(none)'}")
    try:
        print(f"URL             : {files.get_url(record)}")
    except MissingUpdateSiteError:
        pass
    if record.platforms:
        print(f"Platforms       : {', '.join(sorted(record.platforms))}")
    dependencies = [
        dependency.filename + (" (overrides)" if dependency.overrides else "")
        for dependency in record.get_dependencies()
    ]
    print(f"Depends on      : {', '.join(dependencies) or '(none)'}")
    required_by = files.get_dependencies().get(record, [])
    if required_by:
        print(f"Required by     : {', '.join(str(other) for other in required_by)}")
    if record.description:
        print(f"Description     : {record.description}")

"""
upm plan command (-P).

Print the pending actions and why dependencies are pulled in.
"""

from typing import Any

from upm.commands.common import open_session


def plan_command(args: Any) -> int:
    """
    Execute plan command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    files = open_session(args).files
    if not files.has_changes():
        print("Nothing to do")
        return 0

    files.sort()
    sections = [
        ("Install", files.to_install()),
        ("Update", files.to_update()),
        ("Uninstall", files.to_uninstall()),
        ("Upload", files.to_upload(include_metadata_changes=True)),
        ("Remove", files.to_remove()),
    ]
    for title, view in sections:
        names = [record.filename for record in view]
        if names:
            print(f"{title}:")
            for name in names:
                print(f"    {name}")

    for label, overriding in (("required by", False), ("replaced by", True)):
        for dependency, dependents in files.get_dependencies(overriding).explain().items():
            print(f"{dependency} is {label} {', '.join(dependents)}")

    if files.has_upload_or_remove():
        print(f"Sites to upload: {', '.join(files.site_names_to_upload())}")
    return 0

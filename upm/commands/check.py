"""
upm check command (-K).

Report dependency cycles and dangling dependencies.
"""

from typing import Any

from upm.commands.common import open_session


def check_command(args: Any) -> int:
    """
    Execute check command.

    Args:
        args: Parsed command-line arguments

    Returns:
        0 when consistent, 1 when problems were found
    """
    problems = open_session(args).files.check_consistency()
    if not problems:
        print("No problems found")
        return 0
    for problem in problems:
        print(problem)
    return 1

"""
upm CLI - upkeep update planner.

Pacman-style interface for planning updates of tracked files.

Usage:
    upm -Q                        List files needing attention
    upm -Ql                       List all tracked files
    upm -Qs <query>               Search tracked files
    upm -Qi <file>                Show file info
    upm -S <file>...              Mark files for install/update
    upm -R <file>...              Mark files for uninstall
    upm -U                        Mark all available updates
    upm -P                        Show the pending plan
    upm -K                        Check consistency
    upm --sites [add|rename|remove ...]
"""

import argparse
import logging
import sys

from upkeep.config import ConfigError
from upkeep.errors import UpdaterError


class UPMError(Exception):
    """Base exception for upm errors."""

    pass


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with pacman-style flags."""
    parser = argparse.ArgumentParser(
        prog="upm",
        description="upkeep update planner - Pacman-style file manager",
        add_help=False,
    )

    # Operation flags (mutually exclusive)
    ops = parser.add_mutually_exclusive_group()
    ops.add_argument("-S", "--sync", action="store_true", help="Mark for install")
    ops.add_argument("-R", "--remove", action="store_true", help="Mark for uninstall")
    ops.add_argument("-U", "--upgrade", action="store_true", help="Mark updates")
    ops.add_argument("-Q", "--query", action="store_true", help="Query files")
    ops.add_argument("-P", "--plan", action="store_true", help="Show plan")
    ops.add_argument("-K", "--check", action="store_true", help="Check consistency")
    ops.add_argument("--sites", action="store_true", help="Manage update sites")
    ops.add_argument(
        "--init-config", action="store_true", help="Write default settings file"
    )
    ops.add_argument("-h", "--help", action="store_true", help="Show help")

    # Query sub-flags
    parser.add_argument("-l", "--list", action="store_true", help="All files (-Ql)")
    parser.add_argument("-s", "--search", action="store_true", help="Search (-Qs)")
    parser.add_argument("-i", "--info", action="store_true", help="Show info (-Qi)")

    # Common options
    parser.add_argument("--purge", action="store_true", help="Remove from site on -R")
    parser.add_argument(
        "--force", action="store_true", help="Overwrite local changes on -U"
    )
    parser.add_argument("--config", default="upkeep.toml", help="Settings file")
    parser.add_argument("--db", default=None, help="File database (overrides settings)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    # Positional arguments
    parser.add_argument("targets", nargs="*", help="File names, queries or sites")

    return parser


def print_help():
    """Print help message."""
    help_text = """
upm - upkeep update planner

Usage:
    upm -Q                        List files needing attention
    upm -Ql                       List all tracked files
    upm -Qs <query>               Search tracked files
    upm -Qi <file>                Show file info
    upm -S <file>...              Mark files for install/update
    upm -R <file>...              Mark files for uninstall
    upm -U                        Mark all available updates
    upm -P                        Show the pending plan
    upm -K                        Check consistency
    upm --sites                   List update sites
    upm --sites add <name> <url> [upload-target]
    upm --sites rename <old> <new>
    upm --sites remove <name>
    upm --init-config             Write default settings file

Options:
    --purge                       Remove from the update site on -R
    --force                       Include locally modified files on -U
    --config <file>               Settings file (default: upkeep.toml)
    --db <file>                   File database (overrides settings)
    -v, --verbose                 Verbose output
    -h, --help                    Show this help
"""
    print(help_text.strip())


def setup_logging(level: str) -> None:
    """Configure logging to stderr."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for upm CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging("DEBUG" if args.verbose else "WARNING")

    try:
        if args.sync:
            from upm.commands.sync import sync_command

            return sync_command(args)

        elif args.remove:
            from upm.commands.remove import remove_command

            return remove_command(args)

        elif args.upgrade:
            from upm.commands.upgrade import upgrade_command

            return upgrade_command(args)

        elif args.query:
            from upm.commands.query import query_command

            return query_command(args)

        elif args.plan:
            from upm.commands.plan import plan_command

            return plan_command(args)

        elif args.check:
            from upm.commands.check import check_command

            return check_command(args)

        elif args.sites:
            from upm.commands.sites import sites_command

            return sites_command(args)

        elif args.init_config:
            from upm.commands.config import init_config_command

            return init_config_command(args)

        print_help()
        return 0

    except (UPMError, UpdaterError, ConfigError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""
Dependency Graph.

This module provides dependency expansion and consistency checking over the
records of a collection.

Expansion (which files get pulled in by the files to install or update)
assumes an acyclic graph; cycle detection is a separate, advisory pass.
Neither ever raises: unresolved edges are skipped and problems are reported
as strings.
"""

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from upkeep.core.records import Action, FileRecord

if TYPE_CHECKING:
    from upkeep.core.collection import FilesCollection

logger = logging.getLogger(__name__)


class DependencyMap(dict[FileRecord, list[FileRecord]]):
    """Reverse index: dependency record -> records depending on it."""

    def add(self, dependency: FileRecord, dependent: FileRecord) -> bool:
        """
        Record that dependent needs dependency.

        Returns:
            True if dependency was not in the map before
        """
        if dependency in self:
            if dependent not in self[dependency]:
                self[dependency].append(dependent)
            return False
        self[dependency] = [dependent]
        return True

    def explain(self) -> dict[str, list[str]]:
        """Filename form of the map, for display."""
        return {
            dependency.filename: [dependent.filename for dependent in dependents]
            for dependency, dependents in self.items()
        }


class DependencyGraph:
    """
    Dependency queries over a FilesCollection.

    The graph is not cached; every call walks the current records.
    """

    def __init__(self, files: "FilesCollection"):
        self.files = files

    def add_dependencies(
        self, file: FileRecord, dependency_map: DependencyMap, overriding: bool
    ) -> None:
        """
        Add the dependencies of file to dependency_map.

        Only edges whose overrides flag equals overriding are followed.
        Targets are skipped when unresolved, when they do not apply to the
        active platform, when (requires edges) they will be up to date anyway,
        or when (overriding edges) they will not be installed anyway.
        Overriding edges are not transitive; requires edges are expanded
        until a target already in the map is reached.

        Args:
            file: Record whose dependencies to add
            dependency_map: Map to extend
            overriding: Follow "replaces" edges instead of "requires" edges
        """
        platform = self.files.platform
        pending = [file]
        while pending:
            current = pending.pop()
            for dependency in current.get_dependencies():
                if dependency.overrides != overriding:
                    continue
                other = self.files.get(dependency.filename)
                if other is None or not other.is_updateable_platform(platform):
                    continue
                if overriding:
                    if other.will_not_be_installed():
                        continue
                elif other.will_be_up_to_date():
                    continue
                if not dependency_map.add(other, current):
                    continue
                if not overriding:
                    pending.append(other)

    def get_dependencies(self, overriding: bool = False) -> DependencyMap:
        """
        Dependencies pulled in by every file marked for install or update.

        Args:
            overriding: Collect "replaces" edges instead of "requires" edges

        Returns:
            DependencyMap of dependency -> dependents
        """
        result = DependencyMap()
        for file in self.files.filter(
            lambda record: record.action in (Action.INSTALL, Action.UPDATE)
        ):
            self.add_dependencies(file, result, overriding)
        return result

    def _resolved(self, file: FileRecord) -> Iterator[FileRecord]:
        for filename in file.dependencies:
            other = self.files.get(filename)
            if other is not None:
                yield other

    def check_for_circular_dependency(
        self, file: FileRecord, checked: set[FileRecord]
    ) -> str | None:
        """
        Look for a dependency cycle reachable from file.

        The walk keeps the current path separately from the global checked
        set, so every record is explored once across calls sharing checked.

        Args:
            file: Record to start from
            checked: Records already explored; updated in place

        Returns:
            Diagnostic naming only the cycle, or None
        """
        if file in checked:
            return None

        path = [file]
        on_path = {file}
        iterators = [self._resolved(file)]
        while iterators:
            other = next(iterators[-1], None)
            if other is None:
                iterators.pop()
                done = path.pop()
                on_path.discard(done)
                checked.add(done)
                continue
            if other in on_path:
                cycle = path[path.index(other):] + [other]
                # the records on the path belong to a reported cycle
                checked.update(path)
                return "Circular dependency detected: " + " -> ".join(
                    record.filename for record in cycle
                )
            if other in checked:
                continue
            path.append(other)
            on_path.add(other)
            iterators.append(self._resolved(other))
        return None

    def check_consistency(self) -> list[str]:
        """
        Collect consistency problems.

        Reports dependency cycles, obsolete files that still declare
        dependencies, and dependencies on files that are missing, obsolete
        or local-only.

        Returns:
            List of diagnostics (empty when consistent)
        """
        problems: list[str] = []
        checked: set[FileRecord] = set()
        for file in self.files:
            cycle = self.check_for_circular_dependency(file, checked)
            if cycle is not None:
                problems.append(cycle)

            if file.dependencies and file.is_obsolete():
                problems.append(
                    f"Obsolete file {file} has dependencies: "
                    f"{', '.join(file.dependencies)}"
                )
            for filename in file.dependencies:
                other = self.files.get(filename)
                if other is None or not other.has_current_version():
                    problems.append(
                        f"The file {file} has the obsolete/local-only "
                        f"dependency {filename}"
                    )

        for problem in problems:
            logger.warning("%s", problem)
        return problems

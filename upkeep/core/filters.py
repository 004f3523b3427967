"""
File Filters.

This module provides composable predicates over file records and lazy
filtered views.

Key features:
- Primitive predicates (action, status, update site, filename, platform)
- not_/and_/or_ combinators returning predicates
- Restartable, order-preserving views that re-evaluate on every traversal
"""

from collections.abc import Callable, Iterable, Iterator

from upkeep.core.records import Action, FileRecord, Status

Predicate = Callable[[FileRecord], bool]


class FilteredView:
    """
    Lazy view of the records of a source that match a predicate.

    Every iteration walks the source again, so the view follows changes made
    to the source between traversals. The source must not be mutated during
    a traversal (dict-backed sources raise RuntimeError).
    """

    def __init__(self, predicate: Predicate, source: Iterable[FileRecord]):
        self.predicate = predicate
        self.source = source

    def __iter__(self) -> Iterator[FileRecord]:
        predicate = self.predicate
        for record in self.source:
            if predicate(record):
                yield record

    def filter(self, predicate: Predicate) -> "FilteredView":
        return FilteredView(predicate, self)

    def first(self) -> FileRecord | None:
        return next(iter(self), None)

    def count(self) -> int:
        return sum(1 for _ in self)

    def __repr__(self) -> str:
        return f"FilteredView({[record.filename for record in self]})"


def filter_records(predicate: Predicate, source: Iterable[FileRecord]) -> FilteredView:
    """
    Create a lazy filtered view.

    Args:
        predicate: Predicate evaluated once per record and traversal
        source: Records to filter (re-iterated for every traversal)

    Returns:
        FilteredView over source
    """
    return FilteredView(predicate, source)


def search(keyword: str, source: Iterable[FileRecord]) -> FilteredView:
    """Records whose filename contains keyword, ignoring case."""
    return FilteredView(contains(keyword), source)


def yes() -> Predicate:
    return lambda record: True


def is_action(action: Action) -> Predicate:
    return lambda record: record.action == action


def one_of_actions(actions: Iterable[Action]) -> Predicate:
    wanted = frozenset(actions)
    return lambda record: record.action in wanted


def is_no_action() -> Predicate:
    return lambda record: record.action == record.status.default_action


def is_status(status: Status) -> Predicate:
    return lambda record: record.status == status


def one_of_statuses(statuses: Iterable[Status]) -> Predicate:
    wanted = frozenset(statuses)
    return lambda record: record.status in wanted


def is_update_site(name: str) -> Predicate:
    # local-only records have no site and never match
    return lambda record: record.update_site is not None and record.update_site == name


def starts_with(*prefixes: str) -> Predicate:
    return lambda record: record.filename.startswith(prefixes)


def ends_with(suffix: str) -> Predicate:
    return lambda record: record.filename.endswith(suffix)


def contains(keyword: str) -> Predicate:
    needle = keyword.strip().lower()
    return lambda record: needle in record.filename.strip().lower()


def has_metadata_changes() -> Predicate:
    return lambda record: record.metadata_changed


def does_platform_match(platform: str, everything: bool = False) -> Predicate:
    """
    Records applicable to the active platform.

    Args:
        platform: Active platform name
        everything: Match all records (developer sessions see every platform)
    """
    if everything:
        return yes()
    return lambda record: record.is_updateable_platform(platform)


def not_(predicate: Predicate) -> Predicate:
    return lambda record: not predicate(record)


def and_(first: Predicate, *others: Predicate) -> Predicate:
    predicates = (first, *others)
    return lambda record: all(predicate(record) for predicate in predicates)


def or_(first: Predicate, *others: Predicate) -> Predicate:
    predicates = (first, *others)
    return lambda record: any(predicate(record) for predicate in predicates)

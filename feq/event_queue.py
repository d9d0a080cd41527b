"""
Ordered queue of file events that normalizes itself on every insert.

Each add() folds the new event backward against everything already queued,
so the queue always holds the shortest history that means the same thing:
duplicates vanish, delete+create pairs become renames, rename chains
collapse, and a delete wipes out the earlier history of its path.

Everything older than the new event was already normalized by earlier
calls, so only the new event can have become mergeable. One backward sweep
anchored at it restores the whole-queue invariant.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterator, List, Tuple

from .events import FileEvent, FileEventType
from .utils import file_name

logger = logging.getLogger(__name__)

class FileEventQueue:
    """
    Not thread-safe. Callers with concurrent producers must serialize
    access themselves (see watch.QueueingHandler).
    """

    def __init__(self) -> None:
        self._items: List[FileEvent] = []

    @property
    def items(self) -> Tuple[FileEvent, ...]:
        return tuple(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[FileEvent]:
        return iter(tuple(self._items))

    def __repr__(self) -> str:
        return f"FileEventQueue({self._items!r})"

    def add(self, event: FileEvent) -> None:
        self._items.append(event)
        self._aggregate_with_latest()

    def clear(self) -> None:
        self._items.clear()

    def filter(self, predicate: Callable[[FileEvent], bool]) -> int:
        """
        Remove every event matching predicate, keeping the order of the rest.
        Does not re-aggregate. Returns how many events were removed.
        """
        before = len(self._items)
        self._items[:] = [e for e in self._items if not predicate(e)]
        removed = before - len(self._items)
        if removed:
            logger.debug("Filtered %d queued event(s)", removed)
        return removed

    # ---- aggregation -----------------------------------------------------
    def _aggregate_with_latest(self) -> None:
        items = self._items
        current_index = len(items) - 1
        current = items[current_index]
        created_while_queued = False

        # Removing items[prev_index] never shifts the older entries still to
        # be visited, so a plain descending range stays valid.
        for prev_index in range(current_index - 1, -1, -1):
            prev = items[prev_index]

            # identical events
            if current == prev:
                del items[prev_index]
                current_index -= 1
                continue

            # "delete foo/a, create bar/a" -> "rename foo/a to bar/a"
            if (
                current.kind is FileEventType.CREATED
                and prev.kind is FileEventType.DELETED
                and file_name(current.path) == file_name(prev.path)
            ):
                current = replace(current, kind=FileEventType.RENAMED, old_path=prev.path)
                logger.debug("Merged delete+create into %s", current)
                del items[prev_index]
                current_index -= 1
                continue

            # a -> b followed by b -> c
            if (
                current.kind is FileEventType.RENAMED
                and prev.kind is FileEventType.RENAMED
                and file_name(current.old_path) == file_name(prev.path)
            ):
                current = replace(current, old_path=prev.old_path)
                del items[prev_index]
                current_index -= 1
                continue

            # "delete a, rename b to a" -> "rename b to a, change a".
            # Image editors save this way: drop the target, move a temp file onto it.
            if (
                current.kind is FileEventType.RENAMED
                and prev.kind is FileEventType.DELETED
                and current.path == prev.path
            ):
                items.insert(current_index, current)
                current_index += 1
                current = replace(current, kind=FileEventType.CHANGED, old_path=current.path)
                del items[prev_index]
                current_index -= 1
                continue

            # anything before a delete collapses into the delete
            if current.kind is FileEventType.DELETED and prev.path == current.path:
                del items[prev_index]
                current_index -= 1
                if prev.kind is FileEventType.CREATED:
                    created_while_queued = True
                elif prev.kind is FileEventType.RENAMED:
                    # the path existed before this window under its old name
                    created_while_queued = False
                    current = replace(current, path=prev.old_path, old_path=prev.old_path)
                continue

            # anything after a create collapses into the create
            if prev.kind is FileEventType.CREATED and (
                prev.path == current.path or prev.path == current.old_path
            ):
                current = replace(current, kind=FileEventType.CREATED, old_path=current.path)
                del items[prev_index]
                current_index -= 1
                continue

        if created_while_queued:
            # created and deleted while queued: nobody saw it
            logger.debug("Dropped %s, created and deleted while queued", current.path)
            del items[current_index]
            return

        if current.is_noop:
            del items[current_index]
            return

        items[current_index] = current

"""
Real-time watch mode built on top of watchdog.

The watchdog observer thread feeds raw events into a FileEventQueue, which
normalizes them as they arrive. The foreground loop drains the queue on a
fixed interval and hands the normalized events to the consumer (console
and JSONL log).

Design principles:
1. The queue sees events in observation order, one per raw change
2. Every queue access goes through the handler's lock
3. A deleted directory takes all queued history inside it along
"""
from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from .event_queue import FileEventQueue
from .events import FileEvent, FileEventType
from .logger import append_log
from .utils import is_within, matches_exclude_patterns, normalize_rel_path

logger = logging.getLogger(__name__)


def translate_event(event: FileSystemEvent) -> List[FileEvent]:
    """
    Map one raw watchdog event to queue events, paths left as reported.

    - created  -> CREATED(src)
    - modified -> CHANGED(src)
    - deleted  -> DELETED(src)
    - moved    -> RENAMED(src -> dest)
    Anything else (opened, closed, ...) maps to nothing.
    """
    src = _as_str(event.src_path)
    if event.event_type == EVENT_TYPE_CREATED:
        return [FileEvent.created(src)]
    if event.event_type == EVENT_TYPE_MODIFIED:
        return [FileEvent.changed(src)]
    if event.event_type == EVENT_TYPE_DELETED:
        return [FileEvent.deleted(src)]
    if event.event_type == EVENT_TYPE_MOVED:
        dest = _as_str(getattr(event, "dest_path", "") or "")
        if not dest:
            return [FileEvent.deleted(src)]
        return [FileEvent.renamed(src, dest)]
    return []


def _as_str(path) -> str:
    if isinstance(path, bytes):
        return path.decode("utf-8", errors="surrogateescape")
    return str(path)


def replay(events: Iterable[FileEvent]) -> List[FileEvent]:
    """Feed recorded events through a fresh queue and return the result."""
    queue = FileEventQueue()
    for event in events:
        queue.add(event)
    return list(queue.items)


class QueueingHandler(FileSystemEventHandler):
    """
    Watchdog handler that turns raw events into normalized queue entries.
    Paths are stored relative to target, with forward slashes.
    """

    def __init__(
        self,
        target: Path,
        queue: Optional[FileEventQueue] = None,
        exclude: Optional[List[str]] = None,
    ) -> None:
        self.target = target.resolve()
        self.queue = queue if queue is not None else FileEventQueue()
        self.exclude = exclude or []
        self._lock = threading.Lock()

    # ---- helpers ---------------------------------------------------------
    def _rel_path(self, absolute: str) -> Optional[str]:
        """Convert absolute path to relative path from target root."""
        try:
            rel = Path(absolute).resolve().relative_to(self.target)
        except (OSError, ValueError):
            return None
        return normalize_rel_path(rel)

    def _relativize(self, event: FileEvent) -> Optional[FileEvent]:
        path = self._rel_path(event.path)
        if path is None or matches_exclude_patterns(path, self.exclude):
            return None
        if event.kind is not FileEventType.RENAMED:
            return FileEvent(event.kind, path)

        old_path = self._rel_path(event.old_path)
        if old_path is None or matches_exclude_patterns(old_path, self.exclude):
            # moved in from outside (or from an ignored name): new file here
            return FileEvent.created(path)
        return FileEvent.renamed(old_path, path)

    def _push(self, raw: FileSystemEvent) -> None:
        for event in translate_event(raw):
            rel_event = self._relativize(event)
            if rel_event is None:
                # moved out of the target (or to an ignored name) reads as a delete
                if event.kind is FileEventType.RENAMED:
                    old_rel = self._rel_path(event.old_path)
                    if old_rel is not None and not matches_exclude_patterns(old_rel, self.exclude):
                        rel_event = FileEvent.deleted(old_rel)
                if rel_event is None:
                    continue
            with self._lock:
                if raw.is_directory and rel_event.kind is FileEventType.DELETED:
                    self._prune_directory(rel_event.path)
                self.queue.add(rel_event)

    def _prune_directory(self, directory: str) -> None:
        """
        Drop queued history inside a deleted directory. A file moved in from
        outside is gone from its old place too, so it leaves a delete behind.
        Caller holds the lock.
        """
        moved_in = [
            FileEvent.deleted(e.old_path)
            for e in self.queue.items
            if e.kind is FileEventType.RENAMED
            and is_within(e.path, directory)
            and not is_within(e.old_path or "", directory)
        ]
        pruned = self.queue.filter(lambda e: is_within(e.path, directory))
        if pruned:
            logger.debug("Pruned %d event(s) under deleted %s", pruned, directory)
        for event in moved_in:
            self.queue.add(event)

    def drain(self) -> List[FileEvent]:
        """Take the current normalized events and empty the queue."""
        with self._lock:
            events = list(self.queue.items)
            self.queue.clear()
        return events

    # ---- event processors ------------------------------------------------
    def on_created(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._push(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._push(event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._push(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._push(event)


def emit_events(events: List[FileEvent], log_path: Optional[Path], target: Path) -> None:
    """Print normalized events and append them to the JSONL log."""
    for event in events:
        print(str(event))
        if log_path:
            record = {"event": "watch", "target": str(target)}
            record.update(event.to_dict())
            append_log(log_path, record)


def _build_observer(use_polling: bool = False) -> Observer:
    """
    Create a watchdog observer. PollingObserver is slower but more compatible
    across filesystems; used as a fallback when requested.
    """
    if use_polling:
        return PollingObserver()
    return Observer()


def watch(
    target: Path,
    exclude: Optional[List[str]],
    log_path: Optional[Path],
    drain_interval: float = 1.0,
    use_polling: bool = False,
    emit: Callable[[List[FileEvent], Optional[Path], Path], None] = emit_events,
) -> None:
    """
    Start a foreground watch loop. Blocks until KeyboardInterrupt.
    """
    handler = QueueingHandler(target, exclude=exclude)
    observer = _build_observer(use_polling)
    observer.schedule(handler, str(handler.target), recursive=True)
    observer.start()

    print(f"Watching {handler.target} for changes... (Ctrl+C to stop)")
    logger.info("Watching %s (interval=%.2fs, polling=%s)", handler.target, drain_interval, use_polling)
    try:
        while True:
            time.sleep(drain_interval)
            events = handler.drain()
            if events:
                emit(events, log_path, handler.target)
    except KeyboardInterrupt:
        print("Stopping watcher...")
    finally:
        observer.stop()
        observer.join()
        events = handler.drain()
        if events:
            emit(events, log_path, handler.target)

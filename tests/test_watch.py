from pathlib import Path

from watchdog.events import (
    DirCreatedEvent,
    DirDeletedEvent,
    DirModifiedEvent,
    DirMovedEvent,
    FileClosedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

import feq.watch as watch_mod
from feq.events import FileEvent, FileEventType
from feq.logger import read_log
from feq.watch import QueueingHandler, emit_events, replay, translate_event


def test_translate_event_maps_each_kind():
    assert translate_event(FileCreatedEvent("/x/a.txt")) == [FileEvent.created("/x/a.txt")]
    assert translate_event(FileModifiedEvent("/x/a.txt")) == [FileEvent.changed("/x/a.txt")]
    assert translate_event(FileDeletedEvent("/x/a.txt")) == [FileEvent.deleted("/x/a.txt")]
    assert translate_event(FileMovedEvent("/x/a.txt", "/x/b.txt")) == [
        FileEvent.renamed("/x/a.txt", "/x/b.txt")
    ]


def test_translate_event_ignores_unrelated_kinds():
    assert translate_event(FileClosedEvent("/x/a.txt")) == []


def test_replay_normalizes_recorded_stream():
    result = replay([
        FileEvent.deleted("old/a.txt"),
        FileEvent.created("new/a.txt"),
        FileEvent.changed("new/a.txt"),
    ])
    assert result == [FileEvent.renamed("old/a.txt", "new/a.txt"), FileEvent.changed("new/a.txt")]


def test_handler_stores_relative_paths_and_aggregates(tmp_path: Path):
    handler = QueueingHandler(tmp_path)
    handler.on_deleted(FileDeletedEvent(str(tmp_path / "old" / "a.txt")))
    handler.on_created(FileCreatedEvent(str(tmp_path / "new" / "a.txt")))
    assert handler.drain() == [FileEvent.renamed("old/a.txt", "new/a.txt")]
    assert handler.queue.is_empty


def test_handler_ignores_directory_noise(tmp_path: Path):
    handler = QueueingHandler(tmp_path)
    handler.on_created(DirCreatedEvent(str(tmp_path / "sub")))
    handler.on_modified(DirModifiedEvent(str(tmp_path / "sub")))
    assert handler.drain() == []


def test_directory_delete_prunes_queued_events_inside(tmp_path: Path):
    handler = QueueingHandler(tmp_path)
    handler.on_modified(FileModifiedEvent(str(tmp_path / "sub" / "x.txt")))
    handler.on_moved(FileMovedEvent(str(tmp_path / "sub" / "y.txt"), str(tmp_path / "z.txt")))
    handler.on_modified(FileModifiedEvent(str(tmp_path / "other.txt")))
    handler.on_moved(FileMovedEvent(str(tmp_path / "outside" / "w.txt"), str(tmp_path / "sub" / "w.txt")))
    handler.on_deleted(DirDeletedEvent(str(tmp_path / "sub")))

    # the rename out of sub/ stays: z.txt still appeared.
    # the rename into sub/ leaves a delete of its source behind.
    assert handler.drain() == [
        FileEvent.renamed("sub/y.txt", "z.txt"),
        FileEvent.changed("other.txt"),
        FileEvent.deleted("outside/w.txt"),
        FileEvent.deleted("sub"),
    ]


def test_directory_move_is_queued_as_rename(tmp_path: Path):
    handler = QueueingHandler(tmp_path)
    handler.on_moved(DirMovedEvent(str(tmp_path / "a"), str(tmp_path / "b")))
    assert handler.drain() == [FileEvent.renamed("a", "b")]


def test_excluded_and_outside_paths(tmp_path: Path):
    target = tmp_path / "root"
    target.mkdir()
    handler = QueueingHandler(target, exclude=["*.tmp"])

    handler.on_created(FileCreatedEvent(str(target / "a.tmp")))
    assert handler.drain() == []

    # temp file renamed into place reads as a new file
    handler.on_moved(FileMovedEvent(str(target / "a.tmp"), str(target / "a.txt")))
    assert handler.drain() == [FileEvent.created("a.txt")]

    # moved out of the watched tree reads as a delete
    handler.on_moved(FileMovedEvent(str(target / "b.txt"), str(tmp_path / "b.txt")))
    assert handler.drain() == [FileEvent.deleted("b.txt")]

    handler.on_modified(FileModifiedEvent(str(tmp_path / "elsewhere.txt")))
    assert handler.drain() == []


def test_emit_events_prints_and_logs(tmp_path: Path, capsys):
    log_path = tmp_path / "logs" / "events.jsonl"
    emit_events([FileEvent.renamed("a", "b"), FileEvent.changed("b")], log_path, tmp_path)

    out = capsys.readouterr().out
    assert "[RENAMED] a -> b" in out
    assert "[CHANGED] b" in out

    records = [r for _, r in read_log(log_path)]
    assert [r["kind"] for r in records] == ["renamed", "changed"]
    assert records[0]["old_path"] == "a"
    assert records[0]["timestamp"].endswith("Z")


class _FakeObserver:
    def __init__(self, target: Path):
        self.target = target
        self.handler = None
        self.stopped = False

    def schedule(self, handler, path, recursive=False):
        self.handler = handler

    def start(self):
        self.handler.on_created(FileCreatedEvent(str(self.target / "a.txt")))
        self.handler.on_modified(FileModifiedEvent(str(self.target / "a.txt")))

    def stop(self):
        self.stopped = True

    def join(self):
        pass


def test_watch_loop_drains_on_interrupt(tmp_path: Path, monkeypatch):
    observer = _FakeObserver(tmp_path.resolve())
    monkeypatch.setattr(watch_mod, "_build_observer", lambda use_polling=False: observer)

    def interrupt(_seconds):
        raise KeyboardInterrupt

    monkeypatch.setattr(watch_mod.time, "sleep", interrupt)

    emitted = []
    watch_mod.watch(
        tmp_path,
        exclude=None,
        log_path=None,
        drain_interval=0.1,
        emit=lambda events, log_path, target: emitted.append(events),
    )

    assert observer.stopped
    assert len(emitted) == 1
    (event,) = emitted[0]
    assert event.kind is FileEventType.CREATED
    assert event.path == "a.txt"

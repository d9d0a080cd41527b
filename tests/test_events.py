import pytest

from feq.events import FileEvent, FileEventType


def test_equality_compares_kind_path_and_old_path():
    assert FileEvent.changed("a") == FileEvent(FileEventType.CHANGED, "a", None)
    assert FileEvent.changed("a") != FileEvent(FileEventType.CHANGED, "a", "a")
    assert FileEvent.renamed("a", "b") != FileEvent.renamed("c", "b")


def test_events_are_immutable():
    event = FileEvent.created("a")
    with pytest.raises(AttributeError):
        event.path = "b"


def test_is_noop_only_for_self_rename():
    assert FileEvent.renamed("a", "a").is_noop
    assert not FileEvent.renamed("a", "b").is_noop
    assert not FileEvent(FileEventType.CHANGED, "a", "a").is_noop


def test_from_dict_accepts_recorded_rename():
    event = FileEvent.from_dict({"kind": "Renamed", "path": "b", "old_path": "a"})
    assert event == FileEvent.renamed("a", "b")
    assert event.to_dict() == {"kind": "renamed", "path": "b", "old_path": "a"}


def test_to_dict_omits_old_path_for_other_kinds():
    assert FileEvent(FileEventType.CREATED, "a", "a").to_dict() == {"kind": "created", "path": "a"}


@pytest.mark.parametrize(
    "record",
    [
        {"kind": "moved", "path": "a"},
        {"kind": "created"},
        {"kind": "renamed", "path": "b"},
    ],
)
def test_from_dict_rejects_bad_records(record):
    with pytest.raises(ValueError):
        FileEvent.from_dict(record)


def test_str_shows_rename_direction():
    assert str(FileEvent.renamed("a", "b")) == "[RENAMED] a -> b"
    assert str(FileEvent.deleted("a")) == "[DELETED] a"

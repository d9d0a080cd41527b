from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class FileEventType(str, Enum):
    CREATED = "created"
    CHANGED = "changed"
    DELETED = "deleted"
    RENAMED = "renamed"


@dataclass(frozen=True, slots=True)
class FileEvent:
    """
    One filesystem change as seen by the queue.

    old_path only carries meaning for RENAMED. Aggregation may leave it
    equal to path on other kinds, so equality compares all three fields.
    """

    kind: FileEventType
    path: str
    old_path: Optional[str] = None

    @classmethod
    def created(cls, path: str) -> "FileEvent":
        return cls(FileEventType.CREATED, path)

    @classmethod
    def changed(cls, path: str) -> "FileEvent":
        return cls(FileEventType.CHANGED, path)

    @classmethod
    def deleted(cls, path: str) -> "FileEvent":
        return cls(FileEventType.DELETED, path)

    @classmethod
    def renamed(cls, old_path: str, path: str) -> "FileEvent":
        return cls(FileEventType.RENAMED, path, old_path)

    @property
    def is_noop(self) -> bool:
        return self.kind is FileEventType.RENAMED and self.old_path == self.path

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind.value, "path": self.path}
        if self.kind is FileEventType.RENAMED:
            data["old_path"] = self.old_path
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileEvent":
        """
        Build an event from a JSON-style mapping.
        Raises ValueError for an unknown kind or a missing path.
        """
        try:
            kind = FileEventType(str(data.get("kind", "")).lower().strip())
        except ValueError as exc:
            raise ValueError(f"unknown event kind: {data.get('kind')!r}") from exc

        path = data.get("path")
        if not isinstance(path, str) or not path:
            raise ValueError("event is missing a path")

        old_path = data.get("old_path")
        if kind is FileEventType.RENAMED and not isinstance(old_path, str):
            raise ValueError(f"renamed event for {path!r} is missing old_path")
        return cls(kind, path, old_path)

    def __str__(self) -> str:
        if self.kind is FileEventType.RENAMED:
            return f"[{self.kind.name}] {self.old_path} -> {self.path}"
        return f"[{self.kind.name}] {self.path}"

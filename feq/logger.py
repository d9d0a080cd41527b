import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Tuple


def append_log(path: Path, event: dict):
    path.parent.mkdir(parents=True, exist_ok=True)
    event["timestamp"] = datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"

    with path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(event) + "\n")


def read_log(path: Path) -> Iterator[Tuple[int, dict]]:
    """
    Yield (line_number, record) for every non-blank line of a JSONL file.
    Raises ValueError naming the line when a line is not a JSON object.
    """
    with path.open("r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as exc:
                raise ValueError(f"line {lineno}: invalid JSON ({exc.msg})") from exc
            if not isinstance(record, dict):
                raise ValueError(f"line {lineno}: expected a JSON object")
            yield lineno, record

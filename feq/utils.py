import os
from fnmatch import fnmatch
from pathlib import Path
from typing import List, Optional, Union


def file_name(path: Optional[str]) -> str:
    """
    Last component of a path string, split on either separator.
    Returns the input unchanged when it has no separator, "" for None.
    """
    if not path:
        return ""
    return path.replace("\\", "/").rsplit("/", 1)[-1]


def normalize_rel_path(path: Union[str, Path]) -> str:
    """
    Forward slashes everywhere; case-folded on Windows, where the
    filesystem is case-insensitive and watchdog reports mixed case.
    """
    rel = str(path).replace("\\", "/")
    while rel.startswith("./"):
        rel = rel[2:]
    if os.name == "nt":
        rel = rel.lower()
    return rel


def is_within(path: str, directory: str) -> bool:
    """True if path is directory itself or anything below it."""
    directory = directory.rstrip("/")
    return path == directory or path.startswith(directory + "/")


def matches_exclude_patterns(rel_path: str, patterns: List[str]) -> bool:
    """
    Return True if rel_path should be excluded according to patterns.
    Supports simple glob patterns (fnmatch) and negation with leading '!'.
    Patterns are checked in order; a later negation re-includes the path.
    Each pattern is also tried against the bare file name, so "*.tmp"
    excludes temp files in subdirectories too.
    """
    if not patterns:
        return False

    name = file_name(rel_path)
    excluded = False
    for pat in patterns:
        if pat == "":
            continue
        if pat.startswith("!"):
            neg = pat[1:]
            if fnmatch(rel_path, neg) or fnmatch(name, neg):
                excluded = False
        elif fnmatch(rel_path, pat) or fnmatch(name, pat):
            excluded = True
    return excluded

"""
Source globs for swbuild.

The watch and lint globs use ``**`` for "any number of directories". The
standard library's fnmatch lets ``*`` cross directory boundaries, so the
patterns are translated to regular expressions here and shared by the
linter (expansion) and the watcher (matching).
"""

from __future__ import annotations

import glob
import os
import re
from pathlib import Path
from typing import Iterable, Pattern

_GLOB_CHARS = set("*?[")


def glob_to_regex(pattern: str) -> Pattern[str]:
    """Translate a ``/``-separated glob into an anchored regex."""
    out = []
    i = 0
    n = len(pattern)
    while i < n:
        if pattern.startswith("**/", i):
            out.append("(?:[^/]+/)*")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return re.compile("^" + "".join(out) + "$")


def absolute_pattern(pattern: str, work_dir: Path) -> str:
    """Anchor a relative glob at ``work_dir`` and collapse ``..`` segments."""
    joined = os.path.normpath(os.path.join(str(work_dir), pattern))
    return joined.replace(os.sep, "/")


def static_prefix(pattern: str) -> str:
    """Longest leading directory of ``pattern`` that contains no glob chars."""
    parts = pattern.split("/")
    static = []
    for part in parts[:-1]:
        if _GLOB_CHARS & set(part):
            break
        static.append(part)
    return "/".join(static) or "/"


class GlobSet:
    """Include/exclude glob patterns anchored at a working directory."""

    def __init__(
        self,
        includes: Iterable[str],
        excludes: Iterable[str] = (),
        work_dir: Path = Path("."),
    ):
        self.work_dir = work_dir.resolve()
        self.includes = [absolute_pattern(p, self.work_dir) for p in includes]
        self.excludes = [absolute_pattern(p, self.work_dir) for p in excludes]
        self._include_res = [glob_to_regex(p) for p in self.includes]
        self._exclude_res = [glob_to_regex(p) for p in self.excludes]

    def matches(self, path: Path | str) -> bool:
        normalized = os.path.normpath(str(path)).replace(os.sep, "/")
        if not any(r.match(normalized) for r in self._include_res):
            return False
        return not any(r.match(normalized) for r in self._exclude_res)

    def expand(self) -> list[Path]:
        """Existing files matching the set, sorted per include pattern."""
        seen: set[str] = set()
        files: list[Path] = []
        for pattern in self.includes:
            for hit in sorted(glob.glob(pattern, recursive=True)):
                normalized = os.path.normpath(hit).replace(os.sep, "/")
                if normalized in seen or not os.path.isfile(normalized):
                    continue
                if any(r.match(normalized) for r in self._exclude_res):
                    continue
                seen.add(normalized)
                files.append(Path(normalized))
        return files

    def roots(self) -> list[Path]:
        """Directories an observer must watch (recursively) to see every match."""
        roots: list[Path] = []
        for pattern in self.includes:
            root = Path(static_prefix(pattern))
            if root not in roots:
                roots.append(root)
        return roots

"""Glob matching for workspace-relative file paths.

Semantics follow the usual shell/editor convention:
  **   any number of path segments, including none
  *    any run of characters inside one segment
  ?    one character inside one segment
  [..] character class ([!..] negates), never matches '/'

fnmatch is not used because its '*' happily crosses '/'.
"""

from __future__ import annotations

import functools
import re


def normalize_path(path: str) -> str:
    """Forward slashes, no leading './'."""
    p = path.replace("\\", "/").strip()
    while p.startswith("./"):
        p = p[2:]
    return p


def _translate(pattern: str) -> str:
    out: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern[i : i + 2] == "**":
                i += 2
                if i < n and pattern[i] == "/":
                    out.append("(?:.*/)?")
                    i += 1
                else:
                    out.append(".*")
                continue
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            end = pattern.find("]", i + 1)
            if end == -1 or end == i + 1:
                out.append(re.escape(c))
            else:
                body = pattern[i + 1 : end]
                negate = body.startswith("!")
                if negate:
                    body = body[1:]
                body = body.replace("\\", "\\\\")
                if body.startswith("^"):
                    body = "\\" + body
                if body:
                    out.append(f"(?!/)[{'^' if negate else ''}{body}]")
                else:
                    out.append(re.escape(pattern[i : end + 1]))
                i = end
        else:
            out.append(re.escape(c))
        i += 1
    return "".join(out)


@functools.lru_cache(maxsize=256)
def compile_glob(pattern: str) -> re.Pattern:
    """Compile a glob to an anchored regex (cached)."""
    return re.compile(r"(?s:" + _translate(normalize_path(pattern)) + r")\Z")


def glob_match(pattern: str, path: str) -> bool:
    """True when the whole of *path* matches *pattern*."""
    return compile_glob(pattern).match(normalize_path(path)) is not None

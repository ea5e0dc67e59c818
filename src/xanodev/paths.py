"""Canonical locations for shipped documentation and data.

Layout inside the installed package:
  xanodev/xanoscript_docs/   docs_candidates()  — topic markdown + version.json
  xanodev/data/              data_dir()         — structured topic indexes (YAML)
"""

from __future__ import annotations

from pathlib import Path

PACKAGE_DIR = Path(__file__).parent
DOCS_DIRNAME = "xanoscript_docs"
VERSION_FILE = "version.json"


def data_dir() -> Path:
    """Return the directory holding the structured topic YAML files."""
    return PACKAGE_DIR / "data"


def docs_candidates(override: str | Path | None = None) -> list[Path]:
    """Candidate roots for the XanoScript docs, most specific first.

    An explicit override (config or env) wins. Then the copy shipped inside
    the package, then a source checkout's top-level docs directory.
    """
    candidates: list[Path] = []
    if override:
        candidates.append(Path(override).expanduser())
    candidates.append(PACKAGE_DIR / DOCS_DIRNAME)
    candidates.append(PACKAGE_DIR.parent.parent / DOCS_DIRNAME)
    return candidates


def is_docs_root(path: Path) -> bool:
    """A docs root is any directory holding a version.json stamp."""
    return (path / VERSION_FILE).is_file()

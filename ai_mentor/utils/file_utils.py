"""File utilities."""
from __future__ import annotations

from pathlib import Path

# Conservative binary extensions that we should not attempt to decode as UTF-8
BINARY_EXTENSIONS = {
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".zip",
    ".tar",
    ".gz",
    ".exe",
    ".dll",
    ".so",
    ".dylib",
    ".bin",
    ".pdf",
    ".pyc",
    ".class",
    ".o",
}


def _looks_binary(path: Path) -> bool:
    """Heuristic check whether a source file is binary by extension and by inspecting bytes."""
    if path.suffix.lower() in BINARY_EXTENSIONS:
        return True
    with open(path, "rb") as fh:
        chunk = fh.read(512)
    return b"\x00" in chunk


def read_source_file(path: str) -> str:
    """Read a code sample as UTF-8.

    - Raises FileNotFoundError for missing paths.
    - Raises ValueError if the file looks binary.
    - Falls back to UTF-8 with errors="ignore" on decode failures.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Missing file: {path}")
    if _looks_binary(p):
        raise ValueError(f"Binary file: {p.name}")
    try:
        return p.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        return p.read_text(encoding="utf-8", errors="ignore")

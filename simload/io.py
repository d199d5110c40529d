import os
from typing import Generator, Iterable, List, Optional


DEFAULT_EXTENSIONS = (".csv", ".tsv", ".txt")


class IOErrorWithContext(Exception):
    """Raised when file IO operations fail with additional context."""


def _open_text(path: str):
    # Undecodable bytes become U+FFFD so a leading marker is stripped by the
    # header cleaner instead of failing the read.
    return open(path, "r", encoding="utf-8", errors="replace", newline="")


def _strip_line_ending(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n") or line.endswith("\r"):
        return line[:-1]
    return line


def read_first_line(path: str) -> Optional[str]:
    """Return the first line of the file without its line ending.

    Returns None when the file is empty. Exactly one line is read and the
    handle is closed on every exit path.
    """
    if not path:
        raise ValueError("path must be a non-empty string")
    if not os.path.isfile(path):
        raise IOErrorWithContext(f"Not a file: {path}")

    try:
        with _open_text(path) as f:
            line = f.readline()
    except Exception as exc:
        raise IOErrorWithContext(f"Failed to read header of {path}: {exc}") from exc

    if line == "":
        return None
    return _strip_line_ending(line)


def read_lines(path: str) -> List[str]:
    """Return every line of the file, line endings removed."""
    if not path:
        raise ValueError("path must be a non-empty string")
    if not os.path.isfile(path):
        raise IOErrorWithContext(f"Not a file: {path}")

    try:
        with _open_text(path) as f:
            return [_strip_line_ending(line) for line in f]
    except Exception as exc:
        raise IOErrorWithContext(f"Failed to read {path}: {exc}") from exc


def discover_files(
    directory: str, extensions: Iterable[str] = DEFAULT_EXTENSIONS
) -> Generator[str, None, None]:
    """Yield absolute paths to delimited input files under the given directory.

    - Traverses only the top-level of the directory (not recursive).
    - Skips hidden files and non-regular files.
    """
    if not directory:
        raise ValueError("directory must be a non-empty string")
    if not os.path.isdir(directory):
        raise IOErrorWithContext(f"Not a directory: {directory}")

    suffixes = tuple(ext.lower() for ext in extensions)
    try:
        for entry in sorted(os.scandir(directory), key=lambda e: e.name):
            if not entry.is_file():
                continue
            if entry.name.startswith("."):
                continue
            if entry.name.lower().endswith(suffixes):
                yield os.path.abspath(entry.path)
    except Exception as exc:
        raise IOErrorWithContext(f"Failed to list input files in {directory}: {exc}") from exc

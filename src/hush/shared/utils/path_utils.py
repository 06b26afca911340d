"""
Path utilities for ledger keys and ledger file locations.
"""

import posixpath
from pathlib import Path, PurePath


def resolve_location(location: str | Path | None, root_dir: str | Path, default_name: str) -> Path:
    """
    Resolve a ledger location against the project root.

    Args:
        location: Explicit location; relative paths are taken from root_dir,
            absolute paths are used verbatim.
        root_dir: The configured project root.
        default_name: File name used inside root_dir when no location is given.

    Returns:
        Absolute path to the ledger file.
    """
    root = Path(root_dir).absolute()
    if location is None or str(location) == "":
        return root / default_name

    requested = Path(location)
    if requested.is_absolute():
        return requested
    return root / requested


def to_ledger_key(file_path: str | PurePath, root_dir: str | Path | None = None) -> str:
    """
    Normalize a result file path into a ledger key.

    Absolute paths under root_dir become relative to it. Separators are
    always "/" and "." segments are collapsed, so the same file maps to
    the same key on every machine.

    Examples:
        >>> to_ledger_key("/repo/src/app.js", "/repo")
        'src/app.js'
        >>> to_ledger_key("src\\\\lib\\\\util.js")
        'src/lib/util.js'
    """
    raw = str(file_path).replace("\\", "/")

    if root_dir is not None:
        root = str(Path(root_dir).absolute()).replace("\\", "/").rstrip("/")
        if raw == root:
            return "."
        if raw.startswith(root + "/"):
            raw = raw[len(root) + 1:]

    normalized = posixpath.normpath(raw)
    if normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized

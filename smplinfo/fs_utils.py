from __future__ import annotations

import errno
import os
from pathlib import Path

MAX_BASENAME_BYTES = 255
INVALID_NAME_CHARS = ("/", "\x00")


class RenameError(OSError):
    """Raised when a rendered filename cannot be used as a rename target."""


def renamed_path(path: Path, stem: str) -> Path:
    """Return ``path`` with its stem replaced by ``stem``, keeping the extension."""
    if not stem or stem in {".", ".."}:
        raise RenameError(errno.EINVAL, f"rendered filename is empty for {path}")
    if any(char in stem for char in INVALID_NAME_CHARS) or os.sep in stem:
        raise RenameError(errno.EINVAL, f"rendered filename {stem!r} contains a path separator")
    target = path.with_name(f"{stem}{path.suffix}")
    if len(target.name.encode("utf-8")) > MAX_BASENAME_BYTES:
        raise RenameError(errno.ENAMETOOLONG, f"rendered filename is too long: {target.name}")
    return target


def path_exists(path: Path) -> bool:
    try:
        path.stat()
        return True
    except FileNotFoundError:
        return False
    except OSError as exc:
        if exc.errno != errno.ENAMETOOLONG:
            raise
        try:
            with os.scandir(path.parent) as it:
                return any(entry.name == path.name for entry in it)
        except FileNotFoundError:
            return False


def safe_rename(src: Path, dst: Path) -> None:
    """Rename ``src`` to ``dst`` without ever replacing an existing file."""
    if path_exists(dst) and not _same_file(src, dst):
        raise RenameError(errno.EEXIST, f"refusing to overwrite existing file {dst}")
    src.rename(dst)


def _same_file(src: Path, dst: Path) -> bool:
    # Case-only renames on case-insensitive filesystems see dst as existing.
    try:
        return os.path.samefile(src, dst)
    except OSError:
        return False

from __future__ import annotations

import fnmatch
import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import List

from .config import ScanSettings

logger = logging.getLogger(__name__)


class InputScanner:
    """Expands command-line inputs into the list of files to process."""

    def __init__(self, settings: ScanSettings) -> None:
        self.settings = settings
        self._exts = {ext.lower() for ext in self.settings.include_extensions}

    def expand_input(self, path: Path, *, recursive: bool = False) -> List[Path]:
        """Files for one input. Raises OSError when a directory input cannot be listed."""
        if path.is_dir():
            return list(self.iter_directory(path, recursive=recursive))
        # Explicit files are passed through, missing ones fail when opened.
        return [path]

    def iter_directory(self, directory: Path, *, recursive: bool = False) -> Iterator[Path]:
        if not recursive:
            files = [
                path
                for path in directory.iterdir()
                if path.is_file() and self._should_include(path)
            ]
            yield from sorted(files)
            return
        for dirpath, dirnames, filenames in os.walk(directory, onerror=_warn_unreadable):
            dirnames.sort()
            current = Path(dirpath)
            for name in sorted(filenames):
                file_path = current / name
                if not file_path.is_file():
                    continue
                if not self._should_include(file_path):
                    continue
                yield file_path

    def _should_include(self, path: Path) -> bool:
        if path.suffix.lower() not in self._exts:
            return False
        rel = str(path)
        for pattern in self.settings.exclude_patterns:
            if fnmatch.fnmatch(rel, pattern) or fnmatch.fnmatch(path.name, pattern):
                return False
        return True


def _warn_unreadable(exc: OSError) -> None:
    logger.warning("Skipping unreadable directory %s: %s", exc.filename, exc.strerror or exc)

import logging
import os
import stat
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from .errors import ScanError
from .models import Entry

logger = logging.getLogger(__name__)


class FolderScanner:
    """Walks a folder depth-first in lexical order and yields Entry objects.

    The root itself is never yielded. Symlinks are not followed, and only
    directories and regular files are reported.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def scan(self) -> Iterator[Entry]:
        try:
            st = os.lstat(self.root)
        except OSError as exc:
            raise ScanError(f"while listing source: {exc}") from exc
        if not stat.S_ISDIR(st.st_mode):
            return
        yield from self._walk(self.root)

    def _walk(self, directory: Path) -> Iterator[Entry]:
        try:
            with os.scandir(directory) as it:
                children = sorted(it, key=lambda d: d.name)
        except OSError as exc:
            raise ScanError(f"while listing source: {exc}") from exc

        for child in children:
            try:
                st = child.stat(follow_symlinks=False)
            except OSError as exc:
                raise ScanError(f"while listing source: {exc}") from exc

            path = directory / child.name
            if stat.S_ISDIR(st.st_mode):
                yield Entry(
                    path=path,
                    is_dir=True,
                    mtime=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
                    mode=stat.S_IMODE(st.st_mode),
                )
                yield from self._walk(path)
            elif stat.S_ISREG(st.st_mode):
                yield Entry(
                    path=path,
                    is_dir=False,
                    mtime=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
                    size=st.st_size,
                    mode=stat.S_IMODE(st.st_mode),
                )
            else:
                logger.debug("Skipping %s: not a regular file or directory", path)

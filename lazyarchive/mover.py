import logging
import os
from pathlib import Path
from typing import Iterable, List, Tuple

from .errors import MoveError, SizeMismatchError
from .models import Entry, MoveResult

logger = logging.getLogger(__name__)

DIR_MODE = 0o751
CHUNK_SIZE = 1024 * 1024


class SafeMover:
    """Moves files by copy, verify, sync and delete.

    A move either completes (destination written and synced, source gone) or
    leaves the source untouched with no partial file at the destination. The
    only exception is a failing source delete: the copy is already complete,
    so it stays and the error is reported.
    """

    def __init__(self, source_root: Path, dest_root: Path):
        self.source_root = Path(source_root)
        self.dest_root = Path(dest_root)

    def destination_for(self, path: Path) -> Path:
        return self.dest_root / Path(path).relative_to(self.source_root)

    def move_one(self, entry: Entry) -> MoveResult:
        dst = self.destination_for(entry.path)
        try:
            self._copy(entry, dst)
        except OSError as exc:
            raise MoveError(f"while moving file to destination: {exc}") from exc

        try:
            os.remove(entry.path)
        except OSError as exc:
            # The copy is complete and synced: leave it delivered.
            raise MoveError(
                f"while moving file to destination: copied to {dst} "
                f"but could not remove source: {exc}"
            ) from exc

        logger.info("Moved %s -> %s", entry.path, dst)
        return MoveResult(entry.path, dst, entry.size)

    def _copy(self, entry: Entry, dst: Path) -> None:
        make_dirs(dst.parent, DIR_MODE)

        fd = os.open(dst, os.O_RDWR | os.O_CREAT | os.O_TRUNC, entry.mode)
        try:
            with os.fdopen(fd, "r+b") as fout:
                os.chmod(fout.fileno(), entry.mode)
                with open(entry.path, "rb") as fin:
                    written = copy_stream(fin, fout)
                # More bytes than scanned means the source is still being written.
                if written != entry.size:
                    raise SizeMismatchError(
                        f"while moving file to destination: did not write expected "
                        f"byte count to {dst} (expected {entry.size}, wrote {written})"
                    )
                fout.flush()
                os.fsync(fout.fileno())
        except BaseException:
            self._discard(dst)
            raise

    def _discard(self, dst: Path) -> None:
        try:
            os.remove(dst)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove partial file %s: %s", dst, exc)

    def remove_dirs(self, paths: Iterable[Path]) -> Tuple[List[Path], List[Path]]:
        """Remove directories in the given order; failures are only logged.

        A directory that is no longer empty is an expected race, so nothing
        here is raised.
        """
        removed: List[Path] = []
        kept: List[Path] = []
        for path in paths:
            try:
                os.rmdir(path)
            except OSError as exc:
                logger.info("Leaving directory %s in place: %s", path, exc)
                kept.append(path)
                continue
            logger.info("Removed directory %s", path)
            removed.append(path)
        return removed, kept


def make_dirs(path: Path, mode: int) -> None:
    """Like `mkdir -p`, but every directory created gets `mode`."""
    if path.is_dir():
        return
    parent = path.parent
    if parent != path:
        make_dirs(parent, mode)
    try:
        os.mkdir(path, mode)
    except FileExistsError:
        if not path.is_dir():
            raise


def copy_stream(fin, fout, chunk_size: int = CHUNK_SIZE) -> int:
    """Copy everything from fin to fout and return the number of bytes copied."""
    total = 0
    while True:
        chunk = fin.read(chunk_size)
        if not chunk:
            return total
        fout.write(chunk)
        total += len(chunk)

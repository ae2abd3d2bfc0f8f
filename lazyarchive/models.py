from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import List

from .errors import ConfigurationError
from .policy import ResumePolicy, log_and_resume

DEFAULT_INTERVAL = timedelta(minutes=5)
DEFAULT_MIN_FILE_AGE = timedelta(minutes=5)
DEFAULT_MIN_DIR_AGE = timedelta(hours=1)


@dataclass
class MoverConfig:
    """Where to move from and to, how often, and how old things must be.

    Behavior is undefined if `source` and `dest` denote the same location.
    Do not modify fields once a run has started.
    """
    source: Path | str
    dest: Path | str
    interval: timedelta | None = None
    min_file_age: timedelta | None = None
    min_dir_age: timedelta | None = None
    on_error: ResumePolicy | None = None

    def validate(self) -> None:
        if self.source is None or str(self.source) == "":
            raise ConfigurationError("empty source directory")
        if self.dest is None or str(self.dest) == "":
            raise ConfigurationError("empty destination directory")

    def apply_defaults(self) -> "MoverConfig":
        self.validate()
        self.source = Path(self.source)
        self.dest = Path(self.dest)
        if not _positive(self.interval):
            self.interval = DEFAULT_INTERVAL
        if not _positive(self.min_file_age):
            self.min_file_age = DEFAULT_MIN_FILE_AGE
        if not _positive(self.min_dir_age):
            self.min_dir_age = DEFAULT_MIN_DIR_AGE
        if self.on_error is None:
            self.on_error = log_and_resume
        return self


def _positive(value: timedelta | None) -> bool:
    return value is not None and value > timedelta(0)


@dataclass(frozen=True)
class Entry:
    path: Path
    is_dir: bool
    mtime: datetime  # UTC
    mode: int  # permission bits, copied to the destination
    size: int = 0  # files only


@dataclass(frozen=True)
class MoveResult:
    src: Path
    dst: Path
    size: int


@dataclass
class IterationResult:
    moved: List[MoveResult] = field(default_factory=list)
    removed_dirs: List[Path] = field(default_factory=list)
    kept_dirs: List[Path] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return not (self.moved or self.removed_dirs or self.kept_dirs)

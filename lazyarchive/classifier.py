from datetime import datetime, timedelta
from pathlib import Path
from typing import List

from .models import Entry

FILE = "file"
DIR = "dir"


class AgeRules:
    """Holds the two cutoff instants of one iteration."""
    def __init__(self, now: datetime, min_file_age: timedelta, min_dir_age: timedelta):
        self.now = now
        self.file_cutoff = now - min_file_age
        self.dir_cutoff = now - min_dir_age

    def classify(self, entry: Entry) -> str | None:
        # Strictly before the cutoff; an entry exactly at it waits another tick.
        if entry.is_dir:
            return DIR if entry.mtime < self.dir_cutoff else None
        return FILE if entry.mtime < self.file_cutoff else None


class Classifier:
    """Collects the file and directory candidates of a scan."""
    def __init__(self, rules: AgeRules):
        self.rules = rules
        self.files: List[Entry] = []
        self.dirs: List[Entry] = []

    def add(self, entry: Entry) -> str | None:
        kind = self.rules.classify(entry)
        if kind == FILE:
            self.files.append(entry)
        elif kind == DIR:
            self.dirs.append(entry)
        return kind

    @property
    def is_empty(self) -> bool:
        return not self.files and not self.dirs

    def dirs_deepest_first(self) -> List[Path]:
        """Longest paths first, so children are tried before their parents."""
        return [d.path for d in sorted(self.dirs, key=lambda d: len(str(d.path)), reverse=True)]

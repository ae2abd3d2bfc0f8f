import logging
from datetime import datetime, timezone

from .classifier import AgeRules, Classifier
from .errors import MoveError, ScanError
from .models import IterationResult, MoverConfig
from .mover import SafeMover
from .scanner import FolderScanner

logger = logging.getLogger(__name__)


class Relocator:
    """Runs single scan, move and prune passes over the source tree.

    Must not be called concurrently for the same configuration; the
    scheduler's run guard takes care of that.
    """

    def __init__(self, config: MoverConfig):
        self.config = config.apply_defaults()
        self.scanner = FolderScanner(self.config.source)
        self.mover = SafeMover(self.config.source, self.config.dest)

    def _resume(self, error: BaseException) -> bool:
        return self.config.on_error(self.config, error)

    def iterate(self, now: datetime | None = None) -> IterationResult:
        """One iteration. Raises the error the policy refused to resume from.

        `now` must be timezone-aware; mtimes are compared in UTC so local
        clock changes do not age anything.
        """
        rules = AgeRules(
            now or datetime.now(timezone.utc),
            self.config.min_file_age,
            self.config.min_dir_age,
        )
        candidates = Classifier(rules)
        result = IterationResult()

        try:
            for entry in self.scanner.scan():
                candidates.add(entry)
        except ScanError as exc:
            # Go on with whatever was collected before the failure.
            if not self._resume(exc):
                raise

        if candidates.is_empty:
            logger.debug("Nothing old enough under %s", self.config.source)
            return result

        for entry in candidates.files:
            try:
                result.moved.append(self.mover.move_one(entry))
            except MoveError as exc:
                if not self._resume(exc):
                    raise

        removed, kept = self.mover.remove_dirs(candidates.dirs_deepest_first())
        result.removed_dirs.extend(removed)
        result.kept_dirs.extend(kept)

        logger.info(
            "Iteration done: moved %d of %d files, removed %d of %d directories",
            len(result.moved), len(candidates.files),
            len(removed), len(candidates.dirs),
        )
        return result

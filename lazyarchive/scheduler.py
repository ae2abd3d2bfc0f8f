import enum
import logging
import threading

from .errors import (
    AlreadyRunningError,
    LazyArchiveError,
    MoveAbortedError,
    RunCancelled,
)
from .models import MoverConfig
from .relocator import Relocator

logger = logging.getLogger(__name__)


class Cancellation:
    """External stop signal for a run, carrying the reason it fired."""

    def __init__(self):
        self._event = threading.Event()
        self._cause: BaseException | None = None
        self._lock = threading.Lock()

    def cancel(self, cause: BaseException | None = None) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._cause = cause if cause is not None else RunCancelled("run cancelled")
            self._event.set()

    @property
    def cause(self) -> BaseException | None:
        return self._cause

    def wait(self, timeout: float) -> bool:
        """Block up to `timeout` seconds; True if cancelled."""
        return self._event.wait(timeout)


class RunState(enum.Enum):
    NOT_STARTED = "not started"
    RUNNING = "running"
    STOPPED = "stopped"


class Scheduler:
    """Runs a Relocator iteration every `config.interval` until told to stop."""

    def __init__(self, config: MoverConfig):
        self.config = config
        self._state = RunState.NOT_STARTED
        self._lock = threading.Lock()

    @property
    def state(self) -> RunState:
        return self._state

    def run(self, cancellation: Cancellation | None = None) -> None:
        """Move files until cancelled or the resume policy says stop.

        Never returns normally: raises the cancellation cause, or the
        MoveAbortedError the policy refused to resume from.
        """
        with self._lock:
            if self._state is RunState.RUNNING:
                raise AlreadyRunningError("already running")
            self._state = RunState.RUNNING

        try:
            relocator = Relocator(self.config)
            if cancellation is None:
                cancellation = Cancellation()
            interval = self.config.interval.total_seconds()
            logger.info(
                "Moving files from %s to %s every %ss",
                self.config.source, self.config.dest, interval,
            )

            while True:
                if cancellation.wait(interval):
                    raise cancellation.cause
                try:
                    relocator.iterate()
                except (LazyArchiveError, OSError) as exc:
                    aborted = MoveAbortedError(self.config, exc)
                    if not self.config.on_error(self.config, aborted):
                        raise aborted from None
        finally:
            with self._lock:
                self._state = RunState.STOPPED

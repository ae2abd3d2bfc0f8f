"""Resume policies decide whether moving goes on after an error.

A policy is called with the owning `MoverConfig` and the error. Inside an
iteration it receives the raw `ScanError` or `MoveError`; at the scheduler level
it receives a `MoveAbortedError` wrapping whatever ended the iteration.
Returning False stops the iteration (or the whole run, at the scheduler level).
"""
import logging
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .models import MoverConfig

logger = logging.getLogger(__name__)


class ResumePolicy(Protocol):
    def __call__(self, config: "MoverConfig", error: BaseException) -> bool:
        ...


def log_and_resume(config: "MoverConfig", error: BaseException) -> bool:
    """Default policy: log the error and always resume."""
    logger.error("Error while moving files: %s", error)
    return True


def fail_fast(config: "MoverConfig", error: BaseException) -> bool:
    logger.error("Error while moving files, stopping: %s", error)
    return False

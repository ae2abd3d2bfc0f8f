class LazyArchiveError(Exception):
    """Base error for the project."""

class ConfigurationError(LazyArchiveError):
    """Programming error in the mover configuration (e.g. an empty path)."""

class AlreadyRunningError(LazyArchiveError):
    pass

class InvalidPathError(LazyArchiveError):
    pass

class ScanError(LazyArchiveError):
    pass

class MoveError(LazyArchiveError):
    pass

class SizeMismatchError(MoveError):
    pass

class RunCancelled(LazyArchiveError):
    pass

class MoveAbortedError(LazyArchiveError):
    """An iteration gave up.

    `config` is the configuration of the aborted run and `error` is what caused
    the abort. The cause is kept as an attribute, not chained, so a policy sees
    this wrapper unless it looks at `error` itself.
    """
    def __init__(self, config, error: BaseException):
        super().__init__("move iteration aborted")
        self.config = config
        self.error = error

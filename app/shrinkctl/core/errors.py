"""Exception hierarchy for shrink processing.

Collaborator errors are caught by the orchestrator and turned into
terminal states; they never escape a single disk's processing.
"""


class ShrinkError(Exception):
    """Base exception for shrinkctl errors."""


class MountError(ShrinkError):
    """Raised when a disk image cannot be mounted.

    The message is reported verbatim as the disk's terminal state.
    """


class SizeQueryError(ShrinkError):
    """Raised when the supported partition size cannot be determined."""


class CompactionAttemptError(ShrinkError):
    """Raised by a compaction backend when a single attempt fails.

    Attributes:
        output: Captured tool output for diagnostics.
    """

    def __init__(self, message: str, output: list[str] | None = None) -> None:
        super().__init__(message)
        self.output = output or []


class CompactionFailed(ShrinkError):
    """Raised when every compaction attempt for a disk has failed.

    Attributes:
        attempts: Number of attempts made.
    """

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts

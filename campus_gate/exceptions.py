# campus_gate/exceptions.py
"""
Error taxonomy for the gate access core.

Business errors (NotFound, ScanValidationError, ConcurrencyConflict) end up as
deny verdicts. StorageFailure is an infrastructure fault: it is never turned
into a denial, the caller shows a retry prompt instead.
"""


class GateAccessError(Exception):
    """Base class for every error raised by the gate access core."""


class NotFound(GateAccessError):
    """Identity or gate is missing, inactive, or expired."""

    def __init__(self, entity: str, key: str):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} '{key}' not found or inactive")


class ScanValidationError(GateAccessError):
    """Malformed scan, e.g. an exit scan at an entrance-only gate."""


class ConcurrencyConflict(GateAccessError):
    """Visitor usage counter kept changing under us; guard should rescan."""


class StorageFailure(GateAccessError):
    """Backing store unavailable. Retryable; must never surface as a denial."""

    retryable = True


class LogWriteFailed(StorageFailure):
    """The access log could not be committed, so no verdict may be issued."""


class ViolationWriteFailed(StorageFailure):
    """
    The scan was decided and logged but its violation annotation was not saved.
    Carries the logged verdict so the caller can show it and retry only the annotation.
    """

    def __init__(self, message: str, verdict=None):
        super().__init__(message)
        self.verdict = verdict

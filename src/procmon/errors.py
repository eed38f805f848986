"""Exceptions raised by procmon."""


class ProcmonError(Exception):
    """Base class for procmon errors."""


class InitializationError(ProcmonError):
    """Monitoring cannot start: no process table access or unknown CPU count."""


class SamplingError(ProcmonError):
    """Enumerating the process table failed; the whole tick is aborted."""

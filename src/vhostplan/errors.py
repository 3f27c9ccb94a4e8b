"""vhostplan errors."""
from typing import Iterable


class Error(Exception):
    """Generic vhostplan error."""


# Planning errors
class ValidationError(Error):
    """A declared parameter is malformed (bad enum, relative path, wrong shape)."""


class ConfigurationConflictError(Error):
    """Mutually exclusive parameters were set at the same time.

    :ivar str field: Name of the conflicting field
    :ivar tuple params: Names of the parameters that were both set

    """
    def __init__(self, field: str, params: Iterable[str]) -> None:
        self.field = field
        self.params = tuple(params)
        super().__init__(
            f"Conflicting values for {field}: only one of "
            f"{', '.join(self.params)} may be set")


class PlanningInvariantViolation(Error):
    """The resource graph is inconsistent (cycle or conflicting duplicate).

    This always points at a bug in the caller or in a planner, retrying
    will not help.

    """


class NotSupportedError(Error):
    """The operating system family is not supported."""


# Apply errors
class SubprocessError(Error):
    """Subprocess handling error."""


class ApplyError(Error):
    """A resource could not be brought to its desired state."""

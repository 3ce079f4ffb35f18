"""Core enumerations for CEP Finder."""
from enum import Enum


class OutcomeKind(str, Enum):
    """
    How a dispatch or a single source query ended.

    - SUCCESS: An envelope carrying upstream data
    - FAILURE: An envelope carrying an error description
    - TIMEOUT: The shared deadline elapsed first
    """

    SUCCESS = "success"
    FAILURE = "failure"
    TIMEOUT = "timeout"

    def __str__(self) -> str:
        """Return string representation of the enum value."""
        return self.value

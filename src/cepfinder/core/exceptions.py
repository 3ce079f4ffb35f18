"""Custom exceptions for CEP Finder."""


class CepFinderException(Exception):
    """Base exception for all CEP Finder-specific exceptions."""

    pass


class TransportError(CepFinderException):
    """Raised when an upstream call could not be completed."""

    pass


class DecodeError(CepFinderException):
    """Raised when an upstream body is not a JSON object."""

    pass


class DeadlineExceededError(CepFinderException):
    """Raised when the shared dispatch deadline elapses."""

    pass


class MissingParameterError(CepFinderException):
    """Raised when a lookup request omits the required code."""

    pass


class QueryClientError(CepFinderException):
    """Raised when the query CLI cannot obtain an envelope from the server."""

    pass

"""
Error types shared by the quote relay services.
"""


class QuoteRelayError(Exception):
    """Base class for quote relay errors."""


class UpstreamUnavailable(QuoteRelayError):
    """The remote quote source could not be reached or returned unusable data."""


class PersistenceFailure(QuoteRelayError):
    """The quote could not be written to the local store."""


class SinkWriteFailure(QuoteRelayError):
    """The relayed quote could not be written to the output file."""


class DeadlineExceeded(QuoteRelayError, TimeoutError):
    """A bounded operation did not finish before its deadline."""

    def __init__(self, operation: str, timeout: float):
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"Operation '{operation}' exceeded its {timeout * 1000:.0f}ms deadline")

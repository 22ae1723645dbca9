"""Exception hierarchy for the Aura generation engine"""  # noqa: D415


class AuraEngineError(Exception):
    """Base exception for generation engine errors"""  # noqa: D415


class ConfigurationError(AuraEngineError):
    """Raised when configuration is missing or invalid"""  # noqa: D415


class TransportError(AuraEngineError):
    """Raised when a remote generation call fails (network, provider, timeout)"""  # noqa: D415


class AttemptTimeoutError(TransportError):
    """Raised when a single attempt exceeds its timeout"""  # noqa: D415


class EmptyReplyError(TransportError):
    """Raised when the provider answers without usable text"""  # noqa: D415


class RetriesExhaustedError(AuraEngineError):
    """Raised (or returned) when every attempt of a call has failed."""

    def __init__(
        self, attempts: int, last_error: BaseException | None, *, timed_out: bool
    ) -> None:
        self.attempts = attempts
        self.last_error = last_error
        self.timed_out = timed_out
        detail = str(last_error) if last_error is not None else "unknown error"
        super().__init__(f"Failed after {attempts} attempt(s): {detail}")


class QuotaDeniedError(AuraEngineError):
    """Raised when the credit ledger declines an operation."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class StreamCancelledError(AuraEngineError):
    """Raised when a stream is cancelled by its consumer"""  # noqa: D415

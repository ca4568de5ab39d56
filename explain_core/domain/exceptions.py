"""Business exception model.

Every error raised across module boundaries derives from BusinessError so the
orchestrator and the UI can catch one type and report it uniformly.
"""

from explain_core.domain.models import ErrorKind


class BusinessError(Exception):
    """Base business exception.

    Attributes:
        code: machine-readable error code (e.g. "NETWORK_ERROR").
        message: human-readable message.
        http_status: HTTP status when one applies, 400 by default.
        extra: any additional context (endpoint, model, ...).
    """

    kind: ErrorKind = ErrorKind.RESPONSE_UNUSABLE

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class NetworkError(BusinessError):
    """Transport failure: DNS, connection refused, timeout."""

    kind = ErrorKind.TRANSPORT_FAILURE


class ApiError(BusinessError):
    """The endpoint answered with a status other than 200."""

    kind = ErrorKind.SERVER_ERROR


class ResponseParseError(BusinessError):
    """The body did not have the chat-completion shape."""

    kind = ErrorKind.UNPARSEABLE_RESPONSE


class ConfigurationError(BusinessError):
    """Missing or invalid configuration; fatal at construction time."""


class ScanError(BusinessError):
    """Text recognition of a scanned page failed."""


class SpeechError(BusinessError):
    """Speech transcription failed."""

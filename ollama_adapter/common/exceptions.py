"""Content generator domain exceptions."""

from typing import Optional


class AdapterException(Exception):
    """Base exception for content generator operations."""

    def __init__(self, message: str, correlation_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.correlation_id = correlation_id


class ConfigurationException(AdapterException):
    """Generator constructed with an unusable configuration."""

    pass


class ExternalApiException(AdapterException):
    """Network failure or non-2xx response from the provider."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ):
        super().__init__(message, correlation_id)
        self.status_code = status_code
        self.response_body = response_body


class MissingReaderException(AdapterException):
    """Provider response has no readable body."""

    pass


class EmptyResponseException(AdapterException):
    """Non-streaming response carried no message text."""

    pass


class TransformerException(AdapterException):
    """Provider payload could not be converted to the generic format."""

    pass


class StreamTruncatedException(AdapterException):
    """Stream ended before the provider sent its terminal record."""

    pass

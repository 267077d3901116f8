from typing import Optional


class GEDataError(Exception):
    """
    Base error for the gedata SDK.

    Args:
        message (str): The error message.
    """
    def __init__(self, message: str = "An error occurred in the gedata SDK."):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(GEDataError, ValueError):
    """
    Error raised when a consumer is built with an invalid configuration.

    Args:
        message (str): The error message.
    """
    def __init__(self, message: str = "Invalid consumer configuration."):
        super().__init__(message)


class ConsumerClosedError(GEDataError):
    """
    Error raised when an event is added to a consumer that was closed.
    """
    def __init__(self, message: str = "add event failed, SDK has been closed"):
        super().__init__(message)


class SerializationError(GEDataError):
    """
    Error raised when an event record can not be serialized to JSON.

    The record is dropped: it would never serialize on a later attempt either.

    Args:
        reason (Optional[str]): Why serialization failed.
    """
    def __init__(self, reason: Optional[str] = None,
                 message: str = "Unable to serialize event record."):
        self.reason = reason
        info = f" Details: {reason}" if reason else ""
        super().__init__(message + info)


class InvalidEventError(GEDataError):
    """
    Error raised when an event is missing required data.
    """


class InvalidPropertyError(GEDataError):
    """
    Error raised when a property key does not match the allowed pattern.

    Args:
        key (str): The offending property key.
    """
    def __init__(self, key: str,
                 message: str = "Invalid property key: {key!r}. Keys must start with a letter "
                                "or '$' and contain at most 50 letters, digits or underscores."):
        self.key = key
        super().__init__(message.format(key=key))


class DeliveryError(GEDataError):
    """
    Base error for failures while delivering events to the collection endpoint.

    Args:
        message (str): The error message.
        status_code (Optional[int]): The last HTTP status observed, if any.
        code (Optional[int]): The application code returned by the server, if any.
    """
    def __init__(self, message: str = "Unable to deliver events.",
                 status_code: Optional[int] = None,
                 code: Optional[int] = None):
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class NetworkError(DeliveryError):
    """
    Error raised when the request could not be completed at the transport level
    (connection refused, DNS failure, timeout, protocol error).
    """
    def __init__(self, reason: Optional[str] = None,
                 message: str = "Network error while sending events."):
        self.reason = reason
        info = f" Details: {reason}" if reason else ""
        super().__init__(message + info)


class ServerRejectedError(DeliveryError):
    """
    Error raised when the server answered HTTP 200 with a non-zero code.

    Args:
        code (int): The application code returned by the server.
        body (Optional[str]): The raw response body.
    """
    def __init__(self, code: int, body: Optional[str] = None,
                 message: str = "send to receiver failed with code {code}"):
        self.body = body
        info = f": {body}" if body else ""
        super().__init__(message.format(code=code) + info, status_code=200, code=code)


class UnexpectedStatusError(DeliveryError):
    """
    Error raised when the server kept answering with a non-200 status.

    Args:
        status_code (int): The last HTTP status observed.
    """
    def __init__(self, status_code: int,
                 message: str = "Unexpected status code: {status_code}"):
        super().__init__(message.format(status_code=status_code),
                         status_code=status_code)

class RollChatError(Exception):
    """Base class for all errors raised by the chat client."""


class ConfigError(RollChatError):
    """Raised when the configuration or a required credential is missing at startup."""


class InputIoError(RollChatError):
    """Raised when reading from the input stream fails."""


class TransportOrRemoteError(RollChatError):
    """Raised for HTTP/network failures or a non-success status from the remote service."""


class EmptyResponseError(RollChatError):
    """Raised when the remote service succeeds but returns no usable choice."""


class SummarizationError(RollChatError):
    """Raised when the remote call backing a summary update fails or returns no text."""

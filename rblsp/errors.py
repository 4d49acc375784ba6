"""Exceptions raised by the Ruby Language Server."""

from typing import Optional


class LanguageServerError(Exception):
    """Base class for all errors raised by the language server."""


class ProtocolFramingError(LanguageServerError):
    """The input stream does not carry a valid message frame.

    The position in the stream is unknown after this error, so the session
    cannot continue.
    """


class ProtocolDecodeError(LanguageServerError):
    """A correctly framed message could not be decoded.

    The frame was consumed in full, so reading can resume at the next message.
    """

    def __init__(self, message: str, content: bytes = b""):
        """Initialize the error.

        Args:
            message: Description of the decoding problem.
            content: The raw content block that failed to decode.
        """
        super().__init__(message)
        self.content = content


class HandlerFailure(LanguageServerError):
    """A handler raised while processing a message."""

    def __init__(self, method: str, cause: Exception):
        """Initialize the error.

        Args:
            method: The method whose handler failed.
            cause: The exception raised by the handler.
        """
        super().__init__(f"Handler for {method} failed: {cause}")
        self.method = method
        self.cause = cause


class DocumentNotFound(LanguageServerError, KeyError):
    """No text has been stored for the requested document."""

    def __init__(self, uri: str):
        super().__init__(uri)
        self.uri = uri

    def __str__(self) -> str:
        return f"Document not found: {self.uri}"


class ShutdownRequested(LanguageServerError):
    """Raised by lifecycle handlers to end the session."""

    def __init__(self, exit_code: int = 0, reason: Optional[str] = None):
        super().__init__(reason or f"Shutdown requested (exit code {exit_code})")
        self.exit_code = exit_code


class ProtocolEncodeError(LanguageServerError):
    """An outgoing message could not be serialized.

    Nothing was written, so the stream is still at a message boundary.
    """

"""JSON-RPC transport with Content-Length framing."""

import json
import logging
import sys
import threading
from typing import Any, BinaryIO, Dict, Optional

from pydantic import ValidationError

from rblsp.errors import ProtocolDecodeError, ProtocolEncodeError, ProtocolFramingError
from rblsp.protocol.constants import JSONRPC_VERSION
from rblsp.protocol.schema import Message, RequestId, to_wire

CONTENT_LENGTH_HEADER = "content-length"
ENCODING = "utf-8"
MAX_CONTENT_LENGTH = 64 * 1024 * 1024


class JsonRpcTransport:
    """Reads framed messages from one byte stream and writes them to another.

    A frame is a block of ``Name: value`` header lines terminated by CRLF, an
    empty line, then exactly ``Content-Length`` bytes of JSON.
    """

    def __init__(self, reader: BinaryIO, writer: BinaryIO):
        """Initialize the transport.

        Args:
            reader: Binary stream the client writes messages to.
            writer: Binary stream the client reads messages from.
        """
        self.reader = reader
        self.writer = writer
        self.logger = logging.getLogger("rblsp.transport")
        self._write_lock = threading.Lock()

    @classmethod
    def stdio(cls) -> "JsonRpcTransport":
        """Create a transport over the process's standard input and output."""
        return cls(sys.stdin.buffer, sys.stdout.buffer)

    def read(self) -> Optional[Message]:
        """Block until the next message is available and decode it.

        Returns:
            The decoded message, or None when the input ends at a message boundary.

        Raises:
            ProtocolFramingError: If the header block or content length is invalid,
                or the stream ends inside a frame.
            ProtocolDecodeError: If the content block is not a valid message.
        """
        headers = self._read_headers()
        if headers is None:
            return None

        content = self._read_exact(self._content_length(headers))
        message = self._decode(content)

        self.logger.debug(f"Received LSP message: {message.method} (id={message.id})")
        return message

    def _read_headers(self) -> Optional[Dict[str, str]]:
        headers: Dict[str, str] = {}
        while True:
            line = self.reader.readline()
            if not line:
                if headers:
                    raise ProtocolFramingError("Unexpected end of stream inside header block")
                return None

            if line in (b"\r\n", b"\n"):
                if headers:
                    return headers
                # Stray blank line between frames
                continue

            if not line.endswith(b"\n"):
                raise ProtocolFramingError("Unexpected end of stream inside header line")

            try:
                text = line.decode("ascii").rstrip("\r\n")
            except UnicodeDecodeError as e:
                raise ProtocolFramingError(f"Header line is not ASCII: {line!r}") from e

            name, sep, value = text.partition(":")
            if not sep:
                raise ProtocolFramingError(f"Malformed header line: {text!r}")
            headers[name.strip().lower()] = value.strip()

    def _content_length(self, headers: Dict[str, str]) -> int:
        raw = headers.get(CONTENT_LENGTH_HEADER)
        if raw is None:
            raise ProtocolFramingError("Missing Content-Length header")
        if not raw.isdigit():
            raise ProtocolFramingError(f"Invalid Content-Length: {raw!r}")

        length = int(raw)
        if length > MAX_CONTENT_LENGTH:
            raise ProtocolFramingError(f"Content-Length {length} exceeds the {MAX_CONTENT_LENGTH} byte limit")
        return length

    def _read_exact(self, length: int) -> bytes:
        data = b""
        while len(data) < length:
            chunk = self.reader.read(length - len(data))
            if not chunk:
                raise ProtocolFramingError(
                    f"Unexpected end of stream: expected {length} content bytes, got {len(data)}"
                )
            data += chunk
        return data

    def _decode(self, content: bytes) -> Message:
        try:
            payload = json.loads(content.decode(ENCODING))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ProtocolDecodeError(f"Content is not valid JSON: {e}", content) from e

        if not isinstance(payload, dict):
            raise ProtocolDecodeError("Content is not a JSON object", content)

        try:
            return Message.model_validate(payload)
        except ValidationError as e:
            raise ProtocolDecodeError(f"Content is not a request or notification: {e}", content) from e

    def write_response(self, request_id: RequestId, result: Any) -> None:
        """Write a successful response.

        Args:
            request_id: Id of the request being answered.
            result: Response result; written as null when None.

        Raises:
            ProtocolEncodeError: If the result cannot be serialized.
        """
        self._write({"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result})

    def write_error(self, request_id: RequestId, code: int, message: str) -> None:
        """Write an error response.

        Args:
            request_id: Id of the request being answered.
            code: JSON-RPC error code.
            message: Human readable error description.
        """
        self._write({
            "jsonrpc": JSONRPC_VERSION,
            "id": request_id,
            "error": {"code": int(code), "message": message},
        })

    def write_notification(self, method: str, params: Any = None) -> None:
        """Write a notification.

        Args:
            method: The notification method.
            params: Parameters for the method.
        """
        self._write({"jsonrpc": JSONRPC_VERSION, "method": method, "params": params})

    def _write(self, payload: Dict[str, Any]) -> None:
        # Non-ASCII is escaped so lone surrogates from the client can be echoed back
        try:
            content = json.dumps(to_wire(payload), ensure_ascii=True).encode(ENCODING)
        except (TypeError, ValueError) as e:
            raise ProtocolEncodeError(f"Cannot encode message: {e}") from e
        header = f"Content-Length: {len(content)}\r\n\r\n".encode("ascii")

        self.logger.debug(f"Sending LSP message: {payload.get('method') or payload.get('id')}")

        with self._write_lock:
            self.writer.write(header + content)
            self.writer.flush()

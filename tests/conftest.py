"""Shared fixtures for the rblsp test suite."""

import io
import json
from typing import Any, Dict, List

import pytest

from rblsp.completion_provider.base import BaseCompletionProvider, Candidate
from rblsp.linter.base import BaseLinter, Issue
from rblsp.protocol.transport import JsonRpcTransport


def encode_frame(payload: Any) -> bytes:
    content = json.dumps(payload).encode("utf-8")
    return f"Content-Length: {len(content)}\r\n\r\n".encode("ascii") + content


def decode_frames(data: bytes) -> List[Dict[str, Any]]:
    """Split a byte string written by the server into its JSON payloads."""
    messages = []
    stream = io.BytesIO(data)
    while True:
        header = b""
        while not header.endswith(b"\r\n\r\n"):
            chunk = stream.read(1)
            if not chunk:
                assert header == b"", f"Truncated header: {header!r}"
                return messages
            header += chunk
        length = int(header.split(b":")[1].strip())
        messages.append(json.loads(stream.read(length).decode("utf-8")))


class FakeLinter(BaseLinter):
    """Reports a warning for every line containing "warn" and an error for "boom"."""

    def __init__(self):
        self.texts: List[str] = []

    @property
    def name(self) -> str:
        return "fake"

    def analyze(self, text: str) -> List[Issue]:
        self.texts.append(text)
        issues = []
        for number, line in enumerate(text.splitlines()):
            if "warn" in line:
                issues.append(Issue(message=f"warning on {number}", line=number, is_warning=True))
            elif "boom" in line:
                issues.append(Issue(message=f"error on {number}", line=number, is_warning=False))
        return issues


class FakeProvider(BaseCompletionProvider):
    """Returns fixed candidates and records the calls it receives."""

    def __init__(self, candidates: List[Candidate]):
        self.candidates = candidates
        self.calls: List[tuple] = []

    def complete(self, uri, line, character, document_store):
        self.calls.append((uri, line, character, document_store))
        document_store.get(uri)
        return list(self.candidates)


@pytest.fixture
def frame():
    """Encode a payload as a Content-Length framed message."""
    return encode_frame


@pytest.fixture
def frames():
    """Decode all framed messages in a byte string."""
    return decode_frames


@pytest.fixture
def transport_factory():
    """Build a transport reading the given bytes and writing to a BytesIO."""

    def _create(data: bytes = b""):
        output = io.BytesIO()
        return JsonRpcTransport(io.BytesIO(data), output), output

    return _create


@pytest.fixture
def fake_linter():
    return FakeLinter()


@pytest.fixture
def provider_factory():
    return FakeProvider

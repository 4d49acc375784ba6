"""Wire-schema records for the protocol payloads used by the server.

Field names are snake_case in Python and camelCase on the wire.
"""

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

from rblsp.protocol.constants import CompletionItemKind, DiagnosticSeverity, TextDocumentSyncKind

RequestId = Union[StrictInt, StrictStr]


class LspModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Message(BaseModel):
    """A decoded request or notification.

    Requests carry an ``id``; notifications do not.
    """

    id: Optional[RequestId] = None
    method: StrictStr
    params: Any = None

    @property
    def is_request(self) -> bool:
        return self.id is not None


class Position(LspModel):
    line: int
    character: int


class Range(LspModel):
    start: Position
    end: Position


class Diagnostic(LspModel):
    range: Range
    severity: DiagnosticSeverity
    message: str
    source: Optional[str] = None


class PublishDiagnosticsParams(LspModel):
    uri: str
    diagnostics: List[Diagnostic]


class CompletionItem(LspModel):
    label: str
    kind: Optional[CompletionItemKind] = None
    detail: Optional[str] = None


class TextDocumentSyncOptions(LspModel):
    open_close: bool = True
    change: TextDocumentSyncKind = TextDocumentSyncKind.FULL


class CompletionOptions(LspModel):
    resolve_provider: bool = False
    trigger_characters: List[str] = []


class ServerCapabilities(LspModel):
    text_document_sync: TextDocumentSyncOptions
    completion_provider: CompletionOptions


class ServerInfo(LspModel):
    name: str
    version: Optional[str] = None


class InitializeResult(LspModel):
    capabilities: ServerCapabilities
    server_info: Optional[ServerInfo] = None


class TextDocumentIdentifier(LspModel):
    uri: str


class VersionedTextDocumentIdentifier(TextDocumentIdentifier):
    version: Optional[int] = None


class TextDocumentItem(LspModel):
    uri: str
    language_id: str = "ruby"
    version: int = 0
    text: str


class TextDocumentContentChangeEvent(LspModel):
    # Only full-text changes are accepted; ranges are never applied.
    text: str


class DidOpenTextDocumentParams(LspModel):
    text_document: TextDocumentItem


class DidChangeTextDocumentParams(LspModel):
    text_document: VersionedTextDocumentIdentifier
    content_changes: List[TextDocumentContentChangeEvent]


class CompletionParams(LspModel):
    text_document: TextDocumentIdentifier
    position: Position


def to_wire(value: Any) -> Any:
    """Convert a value into plain JSON-compatible data.

    Models are dumped by alias with unset optional fields left out; lists and
    dicts are converted recursively.
    """
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, (list, tuple)):
        return [to_wire(item) for item in value]
    if isinstance(value, dict):
        return {key: to_wire(item) for key, item in value.items()}
    return value

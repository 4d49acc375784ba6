"""Numeric constants defined by the Language Server Protocol."""

from enum import IntEnum

JSONRPC_VERSION = "2.0"


class TextDocumentSyncKind(IntEnum):
    NONE = 0
    FULL = 1
    INCREMENTAL = 2


class DiagnosticSeverity(IntEnum):
    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4


class CompletionItemKind(IntEnum):
    TEXT = 1
    METHOD = 2
    FUNCTION = 3
    CONSTRUCTOR = 4
    FIELD = 5
    VARIABLE = 6
    CLASS = 7
    INTERFACE = 8
    MODULE = 9
    PROPERTY = 10
    KEYWORD = 14
    SNIPPET = 15
    CONSTANT = 21


class ErrorCodes(IntEnum):
    """JSON-RPC error codes used in error responses."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


class Methods:
    """Method names handled by the server."""

    INITIALIZE = "initialize"
    SHUTDOWN = "shutdown"
    EXIT = "exit"
    DID_OPEN = "textDocument/didOpen"
    DID_CHANGE = "textDocument/didChange"
    PUBLISH_DIAGNOSTICS = "textDocument/publishDiagnostics"
    COMPLETION = "textDocument/completion"
    COMPLETION_RESOLVE = "completionItem/resolve"

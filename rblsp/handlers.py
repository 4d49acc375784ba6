"""Protocol method handlers.

`build_registry` binds the linter and the completion providers into closures
and registers them, in a fixed order, on a new registry.
"""

import logging
from typing import Any, Callable, Iterable, List, Sequence

from rblsp import __version__
from rblsp.completion_provider.base import BaseCompletionProvider, Candidate
from rblsp.dispatcher import DOCUMENT_STORE, NOTIFIER, REQUEST, HandlerRegistry
from rblsp.errors import DocumentNotFound, ShutdownRequested
from rblsp.file_store import FileStore
from rblsp.linter.base import BaseLinter, Issue
from rblsp.protocol.constants import DiagnosticSeverity, Methods, TextDocumentSyncKind
from rblsp.protocol.schema import (
    CompletionItem,
    CompletionOptions,
    CompletionParams,
    Diagnostic,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    InitializeResult,
    Message,
    Position,
    PublishDiagnosticsParams,
    Range,
    ServerCapabilities,
    ServerInfo,
    TextDocumentSyncOptions,
)

Notifier = Callable[[str, Any], None]

SERVER_NAME = "rblsp"
TRIGGER_CHARACTERS = ["."]

logger = logging.getLogger(__name__)


def initialize() -> InitializeResult:
    return InitializeResult(
        capabilities=ServerCapabilities(
            text_document_sync=TextDocumentSyncOptions(open_close=True, change=TextDocumentSyncKind.FULL),
            completion_provider=CompletionOptions(resolve_provider=True, trigger_characters=TRIGGER_CHARACTERS),
        ),
        server_info=ServerInfo(name=SERVER_NAME, version=__version__),
    )


def shutdown() -> None:
    raise ShutdownRequested(0, "shutdown requested by client")


def exit_session() -> None:
    raise ShutdownRequested(0, "exit notification received")


def resolve_completion_item(request: Message) -> Any:
    # Items are sent complete, there is nothing left to resolve.
    return request.params


def to_diagnostic(issue: Issue, source: str) -> Diagnostic:
    """Map a linter issue onto a diagnostic spanning the start of its line."""
    position = Position(line=issue.line, character=0)
    return Diagnostic(
        range=Range(start=position, end=position),
        severity=DiagnosticSeverity.WARNING if issue.is_warning else DiagnosticSeverity.ERROR,
        message=issue.message,
        source=source,
    )


def to_completion_item(candidate: Candidate) -> CompletionItem:
    return CompletionItem(label=candidate.name, kind=candidate.kind, detail=candidate.detail)


def publish_diagnostics(uri: str, linter: BaseLinter, notifier: Notifier, document_store: FileStore) -> None:
    """Lint the stored text of a document and publish the full diagnostic list.

    A failing linter publishes an empty list. The list always replaces
    whatever was published for the URI before.

    Args:
        uri: URI of the document to lint.
        linter: The linter to run.
        notifier: Sends a notification to the client.
        document_store: Store holding the document text.
    """
    try:
        issues = linter.analyze(document_store.get(uri))
    except DocumentNotFound:
        logger.debug(f"No text stored for {uri}, nothing to lint")
        issues = []
    except Exception:
        logger.exception(f"Linter {linter.name} failed for {uri}")
        issues = []

    diagnostics = [to_diagnostic(issue, linter.name) for issue in issues]
    logger.debug(f"Publishing {len(diagnostics)} diagnostics for {uri}")
    notifier(Methods.PUBLISH_DIAGNOSTICS, PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics))


def collect_completions(
    providers: Sequence[BaseCompletionProvider],
    uri: str,
    line: int,
    character: int,
    document_store: FileStore,
) -> List[CompletionItem]:
    """Run every provider in order and concatenate their candidates.

    Candidates are neither re-ranked nor de-duplicated. A failing provider
    contributes nothing.

    Args:
        providers: Completion providers, in invocation order.
        uri: URI of the document being edited.
        line: Line number (0-indexed).
        character: Character position (0-indexed).
        document_store: Store holding the document text.

    Returns:
        The completion items of all providers.
    """
    items: List[CompletionItem] = []
    for provider in providers:
        name = type(provider).__name__
        try:
            candidates = provider.complete(uri, line, character, document_store)
        except DocumentNotFound:
            logger.debug(f"{name}: no text stored for {uri}")
            continue
        except Exception:
            logger.exception(f"Completion provider {name} failed for {uri}")
            continue
        items.extend(to_completion_item(candidate) for candidate in candidates)
    return items


def build_registry(linter: BaseLinter, completion_providers: Iterable[BaseCompletionProvider]) -> HandlerRegistry:
    """Create the registry holding every handler the server supports.

    Args:
        linter: Linter run on every document change.
        completion_providers: Providers queried, in order, on completion requests.

    Returns:
        A sealed registry.
    """
    providers = list(completion_providers)
    registry = HandlerRegistry()

    registry.on(Methods.INITIALIZE)(initialize)
    registry.on(Methods.SHUTDOWN)(shutdown)
    registry.on(Methods.EXIT)(exit_session)

    @registry.on(Methods.DID_OPEN, needs={REQUEST, NOTIFIER, DOCUMENT_STORE})
    def did_open(request: Message, notifier: Notifier, document_store: FileStore) -> None:
        params = DidOpenTextDocumentParams.model_validate(request.params)
        uri = params.text_document.uri
        document_store.put(uri, params.text_document.text)
        publish_diagnostics(uri, linter, notifier, document_store)

    @registry.on(Methods.DID_CHANGE, needs={REQUEST, NOTIFIER, DOCUMENT_STORE})
    def did_change(request: Message, notifier: Notifier, document_store: FileStore) -> None:
        params = DidChangeTextDocumentParams.model_validate(request.params)
        uri = params.text_document.uri
        if not params.content_changes:
            logger.debug(f"Change for {uri} carries no content changes")
            return

        # Whole-document sync: each event carries the complete new text
        for change in params.content_changes:
            document_store.put(uri, change.text)
        publish_diagnostics(uri, linter, notifier, document_store)

    @registry.on(Methods.COMPLETION, needs={REQUEST, DOCUMENT_STORE})
    def completion(request: Message, document_store: FileStore) -> List[CompletionItem]:
        params = CompletionParams.model_validate(request.params)
        return collect_completions(
            providers,
            params.text_document.uri,
            params.position.line,
            params.position.character,
            document_store,
        )

    registry.on(Methods.COMPLETION_RESOLVE, needs={REQUEST})(resolve_completion_item)

    registry.seal()
    return registry

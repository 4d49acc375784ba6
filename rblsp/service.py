"""Main service module for the Ruby Language Server.

This module runs the session: it reads one message at a time from the
transport and dispatches it before reading the next, so handlers never run
concurrently and the file store needs no locking.
"""

import logging
from typing import Any, Dict, Optional

from rblsp.completion_provider.ad_hoc import AdHocProvider
from rblsp.completion_provider.rcodetools import RcodetoolsProvider
from rblsp.config import ServerSettings
from rblsp.dispatcher import DOCUMENT_STORE, NOTIFIER, Dispatcher, HandlerRegistry
from rblsp.errors import ProtocolDecodeError, ProtocolFramingError, ShutdownRequested
from rblsp.file_store import FileStore
from rblsp.handlers import build_registry
from rblsp.linter.ruby_wc import RubyWCLinter
from rblsp.protocol.transport import JsonRpcTransport
from rblsp.utils.workspace import WorkspaceManager

EXIT_SUCCESS = 0
EXIT_PROTOCOL_ERROR = 1


class LanguageServer:
    """A single language server session over one transport."""

    def __init__(self, transport: JsonRpcTransport, registry: HandlerRegistry, file_store: FileStore):
        """Initialize the session.

        Args:
            transport: Transport messages are read from and written to.
            registry: Handlers for the session; sealed before the session starts.
            file_store: Store for the text of open documents.
        """
        self.transport = transport
        self.registry = registry
        self.file_store = file_store
        self.dispatcher = Dispatcher(registry, transport)
        self.logger = logging.getLogger("rblsp")

        if not registry.sealed:
            registry.seal()

    @property
    def collaborators(self) -> Dict[str, Any]:
        return {
            NOTIFIER: self.transport.write_notification,
            DOCUMENT_STORE: self.file_store,
        }

    def run(self) -> int:
        """Process messages until the session ends.

        Returns:
            The process exit status: 0 after shutdown, exit or end of input,
            1 after a framing error.
        """
        self.logger.info(f"Serving {len(self.file_store.roots)} workspace root(s)")
        collaborators = self.collaborators

        while True:
            try:
                message = self.transport.read()
            except ProtocolDecodeError as e:
                self.logger.warning(f"Skipping undecodable message: {e}")
                continue
            except ProtocolFramingError as e:
                self.logger.error(f"Aborting session on framing error: {e}")
                return EXIT_PROTOCOL_ERROR

            if message is None:
                self.logger.info("Input stream closed")
                return EXIT_SUCCESS

            try:
                self.dispatcher.dispatch(message, collaborators)
            except ShutdownRequested as e:
                self.logger.info(str(e))
                return e.exit_code


def create_server(settings: ServerSettings, transport: Optional[JsonRpcTransport] = None) -> LanguageServer:
    """Assemble a server session from settings.

    Args:
        settings: Runtime settings.
        transport: Transport to serve on. Defaults to stdin/stdout.

    Returns:
        A ready to run server.
    """
    workspace = WorkspaceManager(settings.roots)
    registry = build_registry(
        RubyWCLinter(settings.ruby_executable),
        [
            RcodetoolsProvider(settings.rct_complete_command),
            AdHocProvider(workspace),
        ],
    )
    return LanguageServer(
        transport or JsonRpcTransport.stdio(),
        registry,
        FileStore(workspace.roots),
    )

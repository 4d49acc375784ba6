"""Handler registry and message dispatch.

Handlers are registered against an exact method name or a predicate over
method names. Each handler declares which collaborators it needs; the
dispatcher passes exactly those as keyword arguments.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, TypeAlias, Union

from pydantic import ValidationError

from rblsp.errors import HandlerFailure, ProtocolEncodeError, ShutdownRequested
from rblsp.protocol.constants import ErrorCodes
from rblsp.protocol.schema import Message
from rblsp.protocol.transport import JsonRpcTransport

REQUEST = "request"
NOTIFIER = "notifier"
DOCUMENT_STORE = "document_store"
COLLABORATORS: FrozenSet[str] = frozenset({REQUEST, NOTIFIER, DOCUMENT_STORE})

MethodPredicate: TypeAlias = Callable[[str], bool]
Matcher: TypeAlias = Union[str, MethodPredicate]


@dataclass(frozen=True)
class Handler:
    """A callback plus the collaborator names it is called with."""

    callback: Callable[..., Any]
    needs: FrozenSet[str] = frozenset()

    def __call__(self, collaborators: Mapping[str, Any]) -> Any:
        kwargs = {name: value for name, value in collaborators.items() if name in self.needs}
        return self.callback(**kwargs)


class HandlerRegistry:
    """Ordered (matcher, handler) pairs evaluated first-match-wins."""

    def __init__(self):
        self._entries: List[Tuple[Matcher, Handler]] = []
        self._sealed = False

    def register(self, matcher: Matcher, handler: Handler) -> None:
        """Associate a method matcher with a handler.

        Registering an exact method name again replaces the earlier handler in
        place; predicates are appended.

        Args:
            matcher: Exact method name or predicate over method names.
            handler: The handler to invoke.

        Raises:
            RuntimeError: If the registry has been sealed.
            ValueError: If the handler declares an unknown collaborator.
        """
        if self._sealed:
            raise RuntimeError("Cannot register handlers on a sealed registry")

        unknown = handler.needs - COLLABORATORS
        if unknown:
            raise ValueError(f"Unknown collaborators requested: {', '.join(sorted(unknown))}")

        if isinstance(matcher, str):
            for index, (existing, _) in enumerate(self._entries):
                if existing == matcher:
                    self._entries[index] = (matcher, handler)
                    return

        self._entries.append((matcher, handler))

    def on(self, matcher: Matcher, needs: Iterable[str] = ()) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of `register`."""

        def decorator(callback: Callable[..., Any]) -> Callable[..., Any]:
            self.register(matcher, Handler(callback, frozenset(needs)))
            return callback

        return decorator

    def find(self, method: str) -> Optional[Handler]:
        """Return the first handler whose matcher accepts the method, if any."""
        for matcher, handler in self._entries:
            if isinstance(matcher, str):
                if matcher == method:
                    return handler
            elif matcher(method):
                return handler
        return None

    def seal(self) -> None:
        """Make the registry read-only for the rest of the session."""
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def __len__(self) -> int:
        return len(self._entries)


class Dispatcher:
    """Routes decoded messages to handlers and writes responses for requests."""

    def __init__(self, registry: HandlerRegistry, transport: JsonRpcTransport):
        """Initialize the dispatcher.

        Args:
            registry: The handlers available for this session.
            transport: Where responses are written.
        """
        self.registry = registry
        self.transport = transport
        self.logger = logging.getLogger("rblsp.dispatcher")

    def dispatch(self, message: Message, collaborators: Mapping[str, Any]) -> bool:
        """Invoke the handler registered for a message.

        Args:
            message: The decoded request or notification.
            collaborators: Collaborators available to handlers, by name.

        Returns:
            True if a handler was found, False if the message was dropped.

        Raises:
            ShutdownRequested: If the handler ends the session. Requests are
                answered before this propagates.
        """
        self.logger.debug(f"Method: {message.method} called")

        handler = self.registry.find(message.method)
        if handler is None:
            self.logger.debug(f"Ignore: {message.method}")
            return False

        try:
            result = self._invoke(message, handler, collaborators)
        except ShutdownRequested:
            if message.is_request:
                self.transport.write_response(message.id, None)
            raise
        except HandlerFailure as e:
            self._report_failure(message, e)
            return True

        if message.is_request:
            try:
                self.transport.write_response(message.id, result)
            except ProtocolEncodeError as e:
                self._report_failure(message, HandlerFailure(message.method, e))
        return True

    def _invoke(self, message: Message, handler: Handler, collaborators: Mapping[str, Any]) -> Any:
        available: Dict[str, Any] = dict(collaborators)
        available[REQUEST] = message
        try:
            return handler(available)
        except ShutdownRequested:
            raise
        except Exception as e:
            raise HandlerFailure(message.method, e) from e

    def _report_failure(self, message: Message, failure: HandlerFailure) -> None:
        self.logger.error(str(failure), exc_info=failure.cause)
        if not message.is_request:
            return

        if isinstance(failure.cause, ValidationError):
            code = ErrorCodes.INVALID_PARAMS
        else:
            code = ErrorCodes.INTERNAL_ERROR
        self.transport.write_error(message.id, code, str(failure.cause))

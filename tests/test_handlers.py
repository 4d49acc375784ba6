"""Tests for the lifecycle, diagnostics and completion handlers."""

import pytest

from rblsp.completion_provider.base import Candidate
from rblsp.dispatcher import DOCUMENT_STORE, NOTIFIER, Dispatcher
from rblsp.errors import ShutdownRequested
from rblsp.file_store import FileStore
from rblsp.handlers import build_registry, collect_completions, publish_diagnostics
from rblsp.protocol.constants import CompletionItemKind
from rblsp.protocol.schema import Message

URI = "file:///a.rb"


@pytest.fixture
def store():
    return FileStore()


@pytest.fixture
def session(transport_factory, fake_linter, provider_factory, store):
    """A dispatcher over the real handlers, writing to an in-memory stream."""
    methods = provider_factory([
        Candidate(name="upcase", detail="String#upcase", kind=CompletionItemKind.METHOD),
        Candidate(name="upto", detail="Integer#upto", kind=CompletionItemKind.METHOD),
    ])
    constants = provider_factory([Candidate(name="Foo", kind=CompletionItemKind.CLASS)])
    transport, output = transport_factory()
    dispatcher = Dispatcher(build_registry(fake_linter, [methods, constants]), transport)
    collaborators = {NOTIFIER: transport.write_notification, DOCUMENT_STORE: store}

    def send(**fields):
        dispatcher.dispatch(Message(**fields), collaborators)

    return send, output


def change(text, uri=URI):
    return {"textDocument": {"uri": uri, "version": 2}, "contentChanges": [{"text": text}]}


def completion_params(line=0, character=0, uri=URI):
    return {"textDocument": {"uri": uri}, "position": {"line": line, "character": character}}


def test_registry_is_sealed(fake_linter):
    assert build_registry(fake_linter, []).sealed


def test_initialize_declares_full_sync_and_completion(session, frames):
    send, output = session

    send(id=1, method="initialize", params={"processId": None, "capabilities": {}})

    (response,) = frames(output.getvalue())
    assert response["id"] == 1
    capabilities = response["result"]["capabilities"]
    assert capabilities["textDocumentSync"] == {"openClose": True, "change": 1}
    assert capabilities["completionProvider"] == {"resolveProvider": True, "triggerCharacters": ["."]}
    assert response["result"]["serverInfo"]["name"] == "rblsp"


def test_did_change_publishes_warning_at_line_start(session, frames, store):
    send, output = session

    send(method="textDocument/didChange", params=change("x = 1\ny = warn\n"))

    (notification,) = frames(output.getvalue())
    assert "id" not in notification
    assert notification["method"] == "textDocument/publishDiagnostics"
    assert notification["params"] == {
        "uri": URI,
        "diagnostics": [{
            "range": {"start": {"line": 1, "character": 0}, "end": {"line": 1, "character": 0}},
            "severity": 2,
            "message": "warning on 1",
            "source": "fake",
        }],
    }
    assert store.get(URI) == "x = 1\ny = warn\n"


def test_errors_are_published_with_error_severity(session, frames):
    send, output = session

    send(method="textDocument/didChange", params=change("boom\n"))

    (notification,) = frames(output.getvalue())
    assert notification["params"]["diagnostics"][0]["severity"] == 1


def test_each_change_replaces_diagnostics_with_latest_text(session, frames, store, fake_linter):
    send, output = session

    send(method="textDocument/didChange", params=change("warn\nwarn\n"))
    send(method="textDocument/didChange", params=change("fine\n"))

    first, second = frames(output.getvalue())
    assert len(first["params"]["diagnostics"]) == 2
    assert second["params"]["diagnostics"] == []
    assert store.get(URI) == "fine\n"
    assert fake_linter.texts == ["warn\nwarn\n", "fine\n"]


def test_multiple_content_changes_keep_the_last(session, frames, store, fake_linter):
    send, output = session
    params = change("one")
    params["contentChanges"].append({"text": "two warn"})

    send(method="textDocument/didChange", params=params)

    assert store.get(URI) == "two warn"
    assert fake_linter.texts == ["two warn"]
    assert len(frames(output.getvalue())) == 1


def test_change_without_content_changes_publishes_nothing(session, store):
    send, output = session

    send(method="textDocument/didChange", params={"textDocument": {"uri": URI}, "contentChanges": []})

    assert output.getvalue() == b""
    assert URI not in store


def test_did_open_stores_text_and_publishes(session, frames, store):
    send, output = session

    send(method="textDocument/didOpen", params={
        "textDocument": {"uri": URI, "languageId": "ruby", "version": 1, "text": "warn"},
    })

    (notification,) = frames(output.getvalue())
    assert notification["params"]["uri"] == URI
    assert len(notification["params"]["diagnostics"]) == 1
    assert store.get(URI) == "warn"


def test_completion_concatenates_providers_in_order(session, frames, store):
    send, output = session
    store.put(URI, "'a'.up\n")

    send(id=2, method="textDocument/completion", params=completion_params(0, 6))

    (response,) = frames(output.getvalue())
    assert response["id"] == 2
    assert response["result"] == [
        {"label": "upcase", "kind": 2, "detail": "String#upcase"},
        {"label": "upto", "kind": 2, "detail": "Integer#upto"},
        {"label": "Foo", "kind": 7},
    ]


def test_completion_for_unknown_document_is_empty(session, frames):
    send, output = session

    send(id=4, method="textDocument/completion", params=completion_params(uri="file:///never-opened.rb"))

    (response,) = frames(output.getvalue())
    assert response == {"jsonrpc": "2.0", "id": 4, "result": []}


def test_completion_with_malformed_params_is_invalid_params(session, frames):
    send, output = session

    send(id=6, method="textDocument/completion", params={"position": {"line": 0}})

    (response,) = frames(output.getvalue())
    assert response["id"] == 6
    assert response["error"]["code"] == -32602
    assert "result" not in response


def test_resolve_returns_item_unchanged(session, frames):
    send, output = session
    item = {"label": "upcase", "kind": 2}

    send(id=8, method="completionItem/resolve", params=item)

    (response,) = frames(output.getvalue())
    assert response["result"] == item


@pytest.mark.parametrize("fields", [{"id": 3, "method": "shutdown"}, {"method": "exit"}])
def test_lifecycle_end_raises_shutdown(fields, session):
    send, _ = session

    with pytest.raises(ShutdownRequested) as excinfo:
        send(**fields)

    assert excinfo.value.exit_code == 0


def test_publish_diagnostics_on_linter_failure_publishes_empty_list(store):
    class BrokenLinter:
        name = "broken"

        def analyze(self, text):
            raise OSError("ruby not found")

    published = []
    store.put(URI, "puts 1")

    publish_diagnostics(URI, BrokenLinter(), lambda method, params: published.append((method, params)), store)

    ((method, params),) = published
    assert method == "textDocument/publishDiagnostics"
    assert params.uri == URI
    assert params.diagnostics == []


def test_collect_completions_skips_failing_provider(provider_factory, store):
    class BrokenProvider:
        def complete(self, uri, line, character, document_store):
            raise RuntimeError("rct-complete crashed")

    store.put(URI, "")
    working = provider_factory([Candidate(name="Bar", kind=CompletionItemKind.CLASS)])

    items = collect_completions([BrokenProvider(), working], URI, 0, 0, store)

    assert [item.label for item in items] == ["Bar"]
    assert working.calls == [(URI, 0, 0, store)]


def test_collect_completions_keeps_duplicates(provider_factory, store):
    store.put(URI, "")
    provider = provider_factory([Candidate(name="Foo", kind=CompletionItemKind.CLASS)])

    items = collect_completions([provider, provider], URI, 0, 0, store)

    assert [item.label for item in items] == ["Foo", "Foo"]

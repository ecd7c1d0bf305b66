from pathlib import Path

import pytest
from lsprotocol import types
from pygls.workspace import Workspace

from cfml_ls.lsp.server import (
    CFMLLanguageServer,
    on_definition,
    on_did_close,
    on_did_open,
    on_document_symbol,
    on_hover,
    on_signature_help,
)


def _server_with_doc(source: str, uri: str = "file:///integration.cfm") -> CFMLLanguageServer:
    server = CFMLLanguageServer()
    server.load_workspace(Path("."))
    server.protocol._workspace = Workspace(None, sync_kind=types.TextDocumentSyncKind.Incremental)
    server.protocol.workspace.put_text_document(types.TextDocumentItem(uri=uri, language_id="cfml", version=1, text=source))
    return server


def _record_published(monkeypatch: pytest.MonkeyPatch, server: CFMLLanguageServer) -> list:
    published: list[types.PublishDiagnosticsParams] = []
    monkeypatch.setattr(server, "text_document_publish_diagnostics", published.append)
    return published


def test_hover_round_trip_integration():
    code = '<cfscript>\ngreeting = "hi";\nwriteOutput(greeting);\n</cfscript>'
    uri = "file:///hover.cfm"
    server = _server_with_doc(code, uri)
    params = types.HoverParams(
        text_document=types.TextDocumentIdentifier(uri=uri),
        position=types.Position(line=2, character=len("writeOutput(gr")),
    )
    hover = on_hover(server, params)
    assert hover is not None
    assert hover.contents.value == "Variable: **greeting** : _string_"


def test_did_open_publishes_diagnostics(monkeypatch: pytest.MonkeyPatch):
    uri = "file:///open.cfm"
    code = "<cfscript>\ny + 1;\n</cfscript>"
    server = _server_with_doc(code, uri)
    published = _record_published(monkeypatch, server)

    on_did_open(
        server,
        types.DidOpenTextDocumentParams(
            text_document=types.TextDocumentItem(uri=uri, language_id="cfml", version=1, text=code)
        ),
    )

    assert len(published) == 1
    assert published[0].uri == uri
    assert [d.message for d in published[0].diagnostics] == ['The variable "y" is not defined.']


def test_did_close_clears_diagnostics(monkeypatch: pytest.MonkeyPatch):
    uri = "file:///close.cfm"
    server = _server_with_doc("<cfscript>\ny;\n</cfscript>", uri)
    published = _record_published(monkeypatch, server)

    on_did_close(server, types.DidCloseTextDocumentParams(text_document=types.TextDocumentIdentifier(uri=uri)))

    assert published == [types.PublishDiagnosticsParams(uri=uri, diagnostics=[])]


def test_tagless_component_is_analyzed_as_script():
    uri = "file:///tmp/Widget.cfc"
    code = "component {\n  function run() {\n    return missing;\n  }\n}\n"
    server = _server_with_doc(code, uri)

    diagnostics = server.diagnostics_for(uri, code)

    assert [d.message for d in diagnostics] == ['The variable "missing" is not defined.']
    assert diagnostics[0].range.start == types.Position(line=2, character=11)


def test_document_symbol_and_definition_round_trip():
    code = "<cfscript>\ntotal = 1;\nfunction bump() {\n    return total + 1;\n}\n</cfscript>"
    uri = "file:///symbols.cfm"
    server = _server_with_doc(code, uri)
    doc_id = types.TextDocumentIdentifier(uri=uri)

    symbols = on_document_symbol(server, types.DocumentSymbolParams(text_document=doc_id))
    assert [s.name for s in symbols] == ["total", "bump"]

    location = on_definition(
        server,
        types.DefinitionParams(text_document=doc_id, position=types.Position(line=3, character=len("    return to"))),
    )
    assert location is not None
    assert location.range.start == types.Position(line=1, character=0)


def test_signature_help_round_trip():
    code = "<cfscript>\npublic numeric function add(numeric a, numeric b) {}\nadd(1, \n</cfscript>"
    uri = "file:///signature.cfm"
    server = _server_with_doc(code, uri)
    params = types.SignatureHelpParams(
        text_document=types.TextDocumentIdentifier(uri=uri),
        position=types.Position(line=2, character=len("add(1, ")),
    )
    help_ = on_signature_help(server, params)
    assert help_ is not None
    assert help_.active_parameter == 1

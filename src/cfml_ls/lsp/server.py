from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from lsprotocol import types
from pygls.lsp.server import LanguageServer
from pygls.uris import to_fs_path

from cfml_ls import __version__
from cfml_ls.analysis.diagnostics import DiagnosticProvider
from cfml_ls.analysis.hover import hover_for_position
from cfml_ls.analysis.signature_help import signature_help_for_position
from cfml_ls.analysis.source_context import SourceContext
from cfml_ls.analysis.symbols import document_symbols, find_definition_offset
from cfml_ls.config import CFMLLSConfig, load_config

log = logging.getLogger(__name__)


class CFMLLanguageServer(LanguageServer):
    def __init__(self) -> None:
        super().__init__(name="cfml-ls", version=__version__)
        self._config = CFMLLSConfig.default(Path.cwd())
        self._diagnostics = DiagnosticProvider(self._config.diagnostics)

    @property
    def config(self) -> CFMLLSConfig:
        return self._config

    def load_workspace(self, root: Path) -> None:
        config, warnings = load_config(root)
        for warning in warnings:
            log.warning(warning)
        self._config = config
        self._diagnostics = DiagnosticProvider(config.diagnostics)
        log.info("Loaded workspace config from %s", root)

    def diagnostics_for(self, uri: str, source: str) -> List[types.Diagnostic]:
        path = to_fs_path(uri) or uri
        return self._diagnostics.analyze(source, treat_as_script=self._config.treats_as_script(path, source))


server = CFMLLanguageServer()


def create_server() -> CFMLLanguageServer:
    return server


@server.feature(types.INITIALIZE)
def on_initialize(ls: CFMLLanguageServer, params: types.InitializeParams) -> None:
    root = _workspace_root(params)
    if root is not None:
        ls.load_workspace(root)


@server.feature(types.TEXT_DOCUMENT_DID_OPEN)
def on_did_open(ls: CFMLLanguageServer, params: types.DidOpenTextDocumentParams) -> None:
    refresh_diagnostics(ls, params.text_document.uri)


@server.feature(types.TEXT_DOCUMENT_DID_CHANGE)
def on_did_change(ls: CFMLLanguageServer, params: types.DidChangeTextDocumentParams) -> None:
    refresh_diagnostics(ls, params.text_document.uri)


@server.feature(types.TEXT_DOCUMENT_DID_CLOSE)
def on_did_close(ls: CFMLLanguageServer, params: types.DidCloseTextDocumentParams) -> None:
    ls.text_document_publish_diagnostics(
        types.PublishDiagnosticsParams(uri=params.text_document.uri, diagnostics=[])
    )


@server.feature(types.TEXT_DOCUMENT_HOVER)
def on_hover(ls: CFMLLanguageServer, params: types.HoverParams) -> Optional[types.Hover]:
    if not ls.config.hover.enabled:
        return None
    doc = ls.workspace.get_text_document(params.text_document.uri)
    return hover_for_position(doc.source, params.position.line, params.position.character)


@server.feature(types.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def on_document_symbol(ls: CFMLLanguageServer, params: types.DocumentSymbolParams) -> List[types.DocumentSymbol]:
    doc = ls.workspace.get_text_document(params.text_document.uri)
    return document_symbols(doc.source)


@server.feature(types.TEXT_DOCUMENT_DEFINITION)
def on_definition(ls: CFMLLanguageServer, params: types.DefinitionParams) -> Optional[types.Location]:
    doc = ls.workspace.get_text_document(params.text_document.uri)
    ctx = SourceContext(doc.source)
    word, _, _ = ctx.word_at(params.position.line, params.position.character)
    if not word:
        return None
    offset = find_definition_offset(doc.source, word)
    if offset is None:
        return None
    start = ctx.position_at(offset)
    end = types.Position(line=start.line, character=start.character + len(word))
    return types.Location(uri=params.text_document.uri, range=types.Range(start=start, end=end))


@server.feature(
    types.TEXT_DOCUMENT_SIGNATURE_HELP,
    types.SignatureHelpOptions(trigger_characters=["(", ","]),
)
def on_signature_help(ls: CFMLLanguageServer, params: types.SignatureHelpParams) -> Optional[types.SignatureHelp]:
    doc = ls.workspace.get_text_document(params.text_document.uri)
    return signature_help_for_position(doc.source, params.position.line, params.position.character)


def refresh_diagnostics(ls: CFMLLanguageServer, uri: str) -> List[types.Diagnostic]:
    doc = ls.workspace.get_text_document(uri)
    diagnostics = ls.diagnostics_for(uri, doc.source)
    ls.text_document_publish_diagnostics(
        types.PublishDiagnosticsParams(uri=uri, version=doc.version, diagnostics=diagnostics)
    )
    return diagnostics


def _workspace_root(params: types.InitializeParams) -> Optional[Path]:
    if params.workspace_folders:
        path = to_fs_path(params.workspace_folders[0].uri)
        if path:
            return Path(path)
    if params.root_uri:
        path = to_fs_path(params.root_uri)
        if path:
            return Path(path)
    if params.root_path:
        return Path(params.root_path)
    return None

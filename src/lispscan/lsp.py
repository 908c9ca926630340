"""Minimal LSP server for Lisp sources: lexical diagnostics only."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from lispscan import __version__
from lispscan.errors import ScanError
from lispscan.scanner import Scanner

server = LanguageServer(
    "lispscan-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full
)


def collect_errors(source: str, filename: str = "") -> list[ScanError]:
    """Scan source to the end and return every lexical error."""
    errors: list[ScanError] = []
    scanner = Scanner(source, filename, error_handler=errors.append)
    for _ in scanner:
        pass
    return errors


def _to_diagnostic(error: ScanError) -> Diagnostic:
    line = error.position.line - 1
    col = error.position.column - 1
    return Diagnostic(
        range=Range(
            start=Position(line=line, character=col),
            end=Position(line=line, character=col + 1),
        ),
        message=error.message,
        severity=DiagnosticSeverity.Error,
        source="lispscan",
    )


def _validate(ls: LanguageServer, uri: str) -> None:
    """Scan the document and publish its diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    filename = uri.rsplit("/", 1)[-1] if "/" in uri else uri
    diagnostics = [_to_diagnostic(err) for err in collect_errors(doc.source, filename)]
    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()

"""Command line entry point: serve LSP over stdio/TCP, or lint CFML files and exit."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Sequence

from lsprotocol import types

from .analysis.diagnostics import SOURCE, DiagnosticProvider
from .config import CONFIG_FILENAME, load_config
from .lsp.server import create_server

log = logging.getLogger(__name__)

EXIT_CLEAN = 0
EXIT_FINDINGS = 1
EXIT_MISSING = 2


def main(argv: Sequence[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=_log_level(args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.analyze:
        if args.tcp:
            parser.error("--analyze cannot be combined with --tcp")
        sys.exit(_lint([Path(name) for name in args.analyze], force_script=args.script))

    server = create_server()
    if args.tcp:
        log.info("Serving on %s:%d", args.host, args.port)
        server.start_tcp(args.host, args.port)
    else:
        server.start_io()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cfml-ls", description="Language server for CFML templates and components")
    serve = parser.add_argument_group("server")
    serve.add_argument("--tcp", action="store_true", help="Listen on TCP instead of stdio")
    serve.add_argument("--host", default="127.0.0.1", help="TCP host (with --tcp)")
    serve.add_argument("--port", type=int, default=2087, help="TCP port (with --tcp)")
    serve.add_argument("--stdio", action="store_true", help="Use stdio; this is the default transport")
    lint = parser.add_argument_group("lint")
    lint.add_argument("--analyze", nargs="+", metavar="FILE", help="Report undefined variables in FILE(s) and exit")
    lint.add_argument("--script", action="store_true", help="Analyze every FILE as a single cfscript block")
    parser.add_argument("--log-level", default="WARNING", help="DEBUG, INFO, WARNING or ERROR")
    return parser


def _log_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.WARNING


def _lint(paths: List[Path], force_script: bool = False) -> int:
    """Print findings for each file; the exit status is the worst outcome seen."""
    status = EXIT_CLEAN
    for path in paths:
        if not path.is_file():
            print(f"File not found: {path}", file=sys.stderr)
            status = max(status, EXIT_MISSING)
            continue
        findings = _analyze(path, force_script)
        for line in _report_lines(path, findings):
            print(line)
        if findings:
            status = max(status, EXIT_FINDINGS)
    return status


def _analyze(path: Path, force_script: bool) -> List[types.Diagnostic]:
    root = _workspace_root(path)
    config, warnings = load_config(root)
    for warning in warnings:
        log.warning(warning)

    source = path.read_text()
    as_script = force_script or config.treats_as_script(str(path), source)
    log.info("Analyzing %s (workspace root %s, script mode %s)", path, root, as_script)
    return DiagnosticProvider(config.diagnostics).analyze(source, treat_as_script=as_script)


def _workspace_root(path: Path) -> Path:
    """Nearest ancestor holding a config file, else the file's own directory."""
    parent = path.resolve().parent
    return next((folder for folder in (parent, *parent.parents) if (folder / CONFIG_FILENAME).exists()), parent)


def _report_lines(path: Path, diagnostics: List[types.Diagnostic]) -> List[str]:
    if not diagnostics:
        return [f"{path}: no issues found"]
    return [
        f"{path}:{diag.range.start.line + 1}:{diag.range.start.character + 1}: "
        f"{_severity_name(diag.severity)} [{diag.source or SOURCE}] {diag.message}"
        for diag in diagnostics
    ]


def _severity_name(severity: types.DiagnosticSeverity | None) -> str:
    return "info" if severity is None else types.DiagnosticSeverity(severity).name.lower()


if __name__ == "__main__":
    main()

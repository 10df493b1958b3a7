"""CLI entry point for the Lingua runtime.

Usage:
    python -m lingua [-v] [--format json|yaml] [--print-result] <ast_document>

The document is a JSON or YAML AST (see lingua_transformer). Output printed
by the program is written to stdout; a runtime error is written to stderr
and the process exits with status 1.
"""

import argparse
import sys
from pathlib import Path

from lingua.lingua_printer import Printer
from lingua.lingua_runtime import ScriptRunner
from lingua import lingua_serialize


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Lingua AST interpreter")
    parser.add_argument('-v', action='count', default=0, help='print debug tracing to stderr')
    parser.add_argument('--format', choices=('json', 'yaml'), help='document format (default: from suffix, then sniffed)')
    parser.add_argument('--print-result', action='store_true', help='print the value of the last top-level expression')
    parser.add_argument('document', help='AST document to execute')
    args = parser.parse_args(argv)

    path = Path(args.document)
    try:
        text = path.read_text(encoding='utf-8')
    except FileNotFoundError:
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)

    runner = ScriptRunner(debug=args.v > 0)
    runner.transformer.origin = path.name
    fmt = args.format or lingua_serialize.detect_format(str(path), text)
    result = runner.run_document(text, fmt=fmt)

    for line in result.stdout:
        print(line)
    if result.status == 'error':
        print(result.format_error(), file=sys.stderr)
        sys.exit(1)
    if args.print_result:
        print(Printer().pformat(result.value))


if __name__ == '__main__':
    main()

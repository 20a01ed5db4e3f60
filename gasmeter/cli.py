"""Command line entry point: instrument Arm64 assembly read from stdin."""

from __future__ import annotations

import sys

from gasmeter.errors import InstrumentError, ResolveError
from gasmeter.graph import build_cfg
from gasmeter.instrument import instrument
from gasmeter.parser import ParsedAssembly

HELP_TEXT = """\
instrumenter - Arm64 assembly gas instrumentation tool

Usage: cat input.s | instrumenter > output.s

Options:
  --help, -h  Show this help message"""

_HELP_FLAGS = frozenset({"--help", "-h"})


def main(argv=None):
    """Read assembly from stdin, write the gas-instrumented assembly to stdout.

    Returns the process exit status: 0 on success, 1 on any error.
    """
    args = sys.argv[1:] if argv is None else list(argv)

    if any(arg in _HELP_FLAGS for arg in args):
        print(HELP_TEXT, file=sys.stderr)
        return 0

    try:
        text = sys.stdin.read()
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Error reading stdin: {exc}", file=sys.stderr)
        return 1

    assembly = ParsedAssembly.parse(text)

    try:
        cfg_result = build_cfg(assembly)
    except ResolveError as exc:
        print(f"Error building CFG: {exc}", file=sys.stderr)
        return 1

    try:
        output = instrument(assembly.lines, cfg_result)
    except InstrumentError as exc:
        print(f"Error instrumenting: {exc}", file=sys.stderr)
        return 1

    sys.stdout.write(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
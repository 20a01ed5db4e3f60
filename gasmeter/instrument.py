"""Insertion of gas metering sequences at loop back-edges.

Each back-edge charges only for the instructions in its own basic block.
Blocks are disjoint, so nested loops never charge an instruction twice.
"""

from __future__ import annotations

from gasmeter.errors import LabelGenerationExhaustedError
from gasmeter.syntax import StatementKind

GAS_REGISTER = "x23"
MAX_SUB_IMMEDIATE = 4095
GAS_LABEL_PREFIX = ".L__gas_ok_"
MAX_LABEL_ATTEMPTS = 10_000


def gas_decrement_instructions(count):
    """Lines that subtract `count` from the gas register, split to fit 12-bit immediates."""
    full, remainder = divmod(count, MAX_SUB_IMMEDIATE)
    lines = [
        f"    sub {GAS_REGISTER}, {GAS_REGISTER}, #{MAX_SUB_IMMEDIATE}"
    ] * full
    if remainder:
        lines.append(f"    sub {GAS_REGISTER}, {GAS_REGISTER}, #{remainder}")
    return lines


class _Instrumenter:
    def __init__(self, lines, cfg_result):
        self._lines = lines
        self._cfg = cfg_result.cfg
        self._resolved = cfg_result.resolved
        self._existing = {line.label for line in lines if line.label is not None}
        self._counter = 0
        self._out = []

    def run(self):
        back_edges = self._back_edge_lines()
        for line in self._lines:
            block = back_edges.get(line.line_number)
            if block is None:
                self._out.append(line.original + "\n")
            else:
                self._instrument_back_edge(line, block)
        return "".join(self._out)

    def _back_edge_lines(self):
        result = {}
        for block in self._cfg.blocks():
            if self._cfg.has_back_edge(block):
                terminator = self._cfg.terminator_index(block)
                result[self._resolved[terminator].line_number] = block
        return result

    def _unique_label(self):
        for _ in range(MAX_LABEL_ATTEMPTS):
            label = f"{GAS_LABEL_PREFIX}{self._counter}"
            self._counter += 1
            if label not in self._existing:
                return label
        raise LabelGenerationExhaustedError(MAX_LABEL_ATTEMPTS)

    def _instrument_back_edge(self, line, block):
        if line.kind is not StatementKind.INSTRUCTION:
            raise AssertionError("back-edge line must contain an instruction")
        label = self._unique_label()
        if line.label is not None:
            self._out.append(f"{line.label}:\n")
        self._out.extend(
            f"{text}\n"
            for text in gas_decrement_instructions(self._cfg.instruction_count(block))
        )
        self._out.append(f"    tbz {GAS_REGISTER}, #63, {label}\n")
        self._out.append("    brk #0\n")
        self._out.append(f"{label}:\n")
        instruction = line.instruction
        self._out.append(
            f"    {instruction.mnemonic} {', '.join(instruction.operands)}\n"
        )


def instrument(lines, cfg_result):
    """Return the assembly text with gas checks inserted before every back-edge.

    Raises LabelGenerationExhaustedError if no unused label is found in time.
    """
    return _Instrumenter(lines, cfg_result).run()
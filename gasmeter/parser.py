"""Whole-file parsing and label resolution for Arm64 assembly."""

from __future__ import annotations

from dataclasses import dataclass

from gasmeter.errors import TrailingLabelsError, UndefinedLabelError
from gasmeter.syntax import (
    BRANCH_MNEMONICS,
    CONDITIONAL_BRANCHES,
    ParsedLine,
    StatementKind,
    parse_line,
)


@dataclass
class ResolvedInstruction:
    """An instruction whose branch target, if any, is an instruction index."""

    index: int
    mnemonic: str
    branch_target: int | None
    line_number: int

    def is_branch(self):
        return self.mnemonic in BRANCH_MNEMONICS

    def is_conditional(self):
        return self.mnemonic in CONDITIONAL_BRANCHES


def _split_lines(text):
    """Split text into lines the way a line iterator does: no empty final line."""
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
        return [part.removesuffix("\r") for part in parts]
    *terminated, last = parts
    return [part.removesuffix("\r") for part in terminated] + [last]


@dataclass(frozen=True)
class ParsedAssembly:
    """Assembly text split into parsed lines, ready for resolution."""

    lines: tuple[ParsedLine, ...]

    @classmethod
    def parse(cls, text):
        """Parse text into lines; nothing is validated and labels stay unresolved."""
        return cls(
            tuple(
                parse_line(line, number)
                for number, line in enumerate(_split_lines(text), start=1)
            )
        )

    def resolve(self):
        """Keep only instructions and resolve branch labels to instruction indices.

        Raises TrailingLabelsError when labels follow the last instruction and
        UndefinedLabelError when a branch names a label that is never defined.
        """
        instructions = []
        target_labels = []
        pending = []
        label_to_index = {}

        for line in self.lines:
            if line.label is not None:
                pending.append(line.label)
            if line.kind is not StatementKind.INSTRUCTION:
                continue
            index = len(instructions)
            for label in pending:
                label_to_index[label] = index
            pending.clear()
            instructions.append(
                ResolvedInstruction(
                    index=index,
                    mnemonic=line.instruction.mnemonic,
                    branch_target=None,
                    line_number=line.line_number,
                )
            )
            target_labels.append(line.instruction.branch_target_label())

        if pending:
            raise TrailingLabelsError(pending)

        for instruction, label in zip(instructions, target_labels):
            if label is None:
                continue
            try:
                instruction.branch_target = label_to_index[label]
            except KeyError:
                raise UndefinedLabelError(label, instruction.line_number) from None

        return instructions
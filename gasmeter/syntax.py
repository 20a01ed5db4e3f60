"""Line-level parsing of GNU-style Arm64 assembly text."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

CONDITION_CODES = frozenset(
    {"eq", "ne", "mi", "pl", "vs", "vc", "hi", "ls", "ge", "lt", "gt", "le", "al"}
)
CONDITIONAL_BRANCHES = frozenset(
    {f"b.{code}" for code in CONDITION_CODES} | {"cbz", "cbnz", "tbz", "tbnz"}
)
INDIRECT_BRANCHES = frozenset({"br", "blr", "ret"})
CALLS = frozenset({"bl", "blr"})
RETURNS = frozenset({"ret"})
BRANCH_MNEMONICS = CONDITIONAL_BRANCHES | INDIRECT_BRANCHES | CALLS | {"b"}

_COMMENT_MARKERS = ("//", "/*", ";", "@")
_LABEL_PUNCTUATION = frozenset("_.$")


class StatementKind(Enum):
    """What a line holds after any label."""

    INSTRUCTION = "instruction"
    DIRECTIVE = "directive"
    EMPTY = "empty"


@dataclass(frozen=True)
class Instruction:
    """An instruction whose operands are still raw text."""

    mnemonic: str
    operands: tuple[str, ...] = ()

    @classmethod
    def parse(cls, text):
        """Parse an instruction from text with label and comments removed."""
        parts = text.strip().split(None, 1)
        mnemonic = parts[0] if parts else ""
        rest = parts[1] if len(parts) > 1 else ""
        return cls(mnemonic, parse_operands(rest))

    def is_branch(self):
        return self.mnemonic in BRANCH_MNEMONICS

    def is_conditional(self):
        return self.mnemonic in CONDITIONAL_BRANCHES

    def is_indirect(self):
        return self.mnemonic in INDIRECT_BRANCHES

    def is_call(self):
        return self.mnemonic in CALLS

    def is_return(self):
        return self.mnemonic in RETURNS

    def branch_target_label(self):
        """The label a direct branch jumps to, or None."""
        if not self.is_branch() or self.is_indirect() or not self.operands:
            return None
        return self.operands[-1]


@dataclass(frozen=True)
class ParsedLine:
    """One line of assembly, split into label and statement."""

    label: str | None
    kind: StatementKind
    line_number: int
    original: str
    instruction: Instruction | None = None


def parse_operands(text):
    """Split comma-separated operands, ignoring commas inside brackets."""
    operands = []
    current = []
    depth = 0
    for char in text.strip():
        if char == "[":
            depth += 1
        elif char == "]":
            depth = max(depth - 1, 0)
        elif char == "," and depth == 0:
            operand = "".join(current).strip()
            if operand:
                operands.append(operand)
            current = []
            continue
        current.append(char)
    operand = "".join(current).strip()
    if operand:
        operands.append(operand)
    return tuple(operands)


def strip_comment(line):
    """Cut the line at the earliest of `//`, `/*`, `;` or `@`."""
    positions = [
        pos for marker in _COMMENT_MARKERS if (pos := line.find(marker)) >= 0
    ]
    return line[: min(positions)] if positions else line


def _label_colon(line):
    stripped = line.lstrip()
    offset = len(line) - len(stripped)
    for pos, char in enumerate(stripped, start=offset):
        if char == ":":
            return pos
        if not (char.isalnum() or char in _LABEL_PUNCTUATION):
            return None
    return None


def split_label(line):
    """Return (label or None, remaining text)."""
    colon = _label_colon(line)
    if colon is None:
        return None, line
    return line[:colon].strip(), line[colon + 1 :].strip()


def parse_line(text, line_number):
    """Parse one line of assembly text."""
    body = strip_comment(text).strip()
    if not body:
        return ParsedLine(None, StatementKind.EMPTY, line_number, text)

    label, rest = split_label(body)
    if not rest:
        return ParsedLine(label, StatementKind.EMPTY, line_number, text)
    if rest.startswith("."):
        return ParsedLine(label, StatementKind.DIRECTIVE, line_number, text)
    return ParsedLine(
        label,
        StatementKind.INSTRUCTION,
        line_number,
        text,
        Instruction.parse(rest),
    )
"""Exceptions raised while resolving labels and instrumenting assembly."""

from __future__ import annotations


class ResolveError(Exception):
    """Label resolution failed."""


class TrailingLabelsError(ResolveError):
    """Labels at the end of the input with no instruction after them."""

    def __init__(self, labels):
        self.labels = list(labels)
        rendered = ", ".join(f'"{label}"' for label in self.labels)
        super().__init__(f"trailing labels with no instruction: [{rendered}]")

    def __eq__(self, other):
        if not isinstance(other, TrailingLabelsError):
            return NotImplemented
        return self.labels == other.labels

    def __hash__(self):
        return hash(tuple(self.labels))


class UndefinedLabelError(ResolveError):
    """A branch refers to a label that is never defined."""

    def __init__(self, label, line):
        self.label = label
        self.line = line
        super().__init__(f"undefined label '{label}' referenced at line {line}")

    def __eq__(self, other):
        if not isinstance(other, UndefinedLabelError):
            return NotImplemented
        return (self.label, self.line) == (other.label, other.line)

    def __hash__(self):
        return hash((self.label, self.line))


class InstrumentError(Exception):
    """Instrumentation failed."""


class LabelGenerationExhaustedError(InstrumentError):
    """No unused gas-check label could be found within the attempt limit."""

    def __init__(self, max_attempts):
        self.max_attempts = max_attempts
        super().__init__(
            f"exceeded maximum label generation attempts ({max_attempts})"
        )
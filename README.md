# gasmeter

`gasmeter` reads GNU-style Arm64 assembly, the kind that LLVM and GCC
emit. It puts a gas check in front of every loop back-edge, so each
loop has to pay for the instructions it runs. A back-edge is a branch
whose target block dominates the block the branch is in. Before each
such branch it inserts:

```asm
    sub x23, x23, #N        // N = instructions in the branch's basic block
    tbz x23, #63, .L__gas_ok_0
    brk #0                  // out of gas
.L__gas_ok_0:
    b.lt .Lloop             // the original branch
```

Register `x23` holds the gas counter. Each back-edge charges only for
the instructions in its own basic block. Blocks do not overlap, so
nested loops never charge an instruction twice. When a count is above
4095, the largest immediate that `sub` accepts, the decrement is split
across several `sub` instructions. Code that only branches forward is
left unchanged.

## Command line

```sh
gasmeter < input.s > output.s
```

The command reads assembly from standard input and writes the
instrumented text to standard output. `--help` or `-h` prints usage on
standard error and exits with status 0. If a branch names an undefined
label, or labels are left at the end of the input with no instruction
after them, the command prints the error on standard error and exits
with status 1.

## Library

```python
from gasmeter.parser import ParsedAssembly
from gasmeter.graph import build_cfg
from gasmeter.instrument import instrument

asm = ParsedAssembly.parse(source_text)
cfg_result = build_cfg(asm)          # raises ResolveError on bad labels
print(instrument(asm.lines, cfg_result), end="")
```

- `gasmeter.syntax` parses single lines. It provides `parse_line`,
  `strip_comment`, `split_label` and `parse_operands`, plus the
  `ParsedLine`, `Instruction` and `StatementKind` types. An
  `Instruction` classifies itself with `is_branch()`,
  `is_conditional()`, `is_indirect()`, `is_call()` and `is_return()`.
  `branch_target_label()` gives the label a direct branch jumps to.
- `gasmeter.parser.ParsedAssembly.parse(text)` splits the text into
  lines. `resolve()` returns a list of `ResolvedInstruction` with each
  branch target turned into an instruction index.
- `gasmeter.graph.build_cfg(assembly)` returns a `CfgResult`, which
  holds `cfg` (a `BlockGraph`) and `resolved`. You can inspect the graph
  with `blocks()`, `has_back_edge(block)`, `instruction_count(block)`,
  `terminator_index(block)` and `back_edge_target(block)`.
  `build_block_graph(instructions)` builds a graph directly from
  resolved instructions.
- `gasmeter.instrument.instrument(lines, cfg_result)` returns the
  instrumented text. `gas_decrement_instructions(count)` returns the
  `sub` lines for a given count.

Errors live in `gasmeter.errors`:

- `TrailingLabelsError` (with `.labels`) and `UndefinedLabelError`
  (with `.label` and `.line`) are subclasses of `ResolveError`.
- `LabelGenerationExhaustedError` (with `.max_attempts`) is a subclass
  of `InstrumentError`. It is raised when no unused `.L__gas_ok_N`
  label turns up within 10,000 attempts.

## Comments, labels and output

Four comment styles are stripped: `//`, `/*`, `;` and `@`. The earliest
one on a line wins. A label may contain letters, digits, `_`, `.` and
`$`, and ends at a colon. A line whose remaining text starts with `.` is
treated as a directive.

Lines that are not instrumented are written back as they came in, each
followed by a newline. An instrumented branch line is rebuilt from its
label, mnemonic and operands, so any comment on that line is dropped.

## Limitations

- Dominance is computed from the first instruction only. Code that
  cannot be reached from it is never instrumented, such as a second
  function that follows a `ret`.
- `/* ... */` comments that span several lines are not understood, and
  `#` does not start a comment.
- Mnemonics and operands are not validated, and nothing is assembled.
  The output is assembly text for your own toolchain to build.
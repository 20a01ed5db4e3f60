"""Basic-block control flow graph over resolved instructions, with back-edge detection."""

from __future__ import annotations

from dataclasses import dataclass, field

from gasmeter.syntax import CALLS


@dataclass(frozen=True)
class BasicBlock:
    """A maximal run of instructions entered only at its first one."""

    start: int
    end: int
    successors: tuple[int, ...] = ()
    terminator: int | None = None
    back_edge_target: int | None = None

    @property
    def instruction_count(self):
        return self.end - self.start


@dataclass(frozen=True)
class BlockGraph:
    """Basic blocks in instruction order; block 0 is the entry."""

    block_list: tuple[BasicBlock, ...] = ()

    def __len__(self):
        return len(self.block_list)

    def __getitem__(self, block):
        return self.block_list[block]

    def blocks(self):
        """Iterate over block indices."""
        return iter(range(len(self.block_list)))

    def has_back_edge(self, block):
        """True when the block's branch jumps to a block that dominates it."""
        return self.block_list[block].back_edge_target is not None

    def terminator_index(self, block):
        """Instruction index of the block's ending branch, or None."""
        return self.block_list[block].terminator

    def instruction_count(self, block):
        return self.block_list[block].instruction_count

    def back_edge_target(self, block):
        """Instruction index the back-edge jumps to, or None."""
        return self.block_list[block].back_edge_target


@dataclass
class CfgResult:
    """A control flow graph with the instructions it was built from."""

    cfg: BlockGraph
    resolved: list = field(default_factory=list)


def _ends_block(instruction):
    return instruction.is_branch() and instruction.mnemonic not in CALLS


def _reverse_postorder(successors):
    visited = {0}
    postorder = []
    stack = [(0, iter(successors[0]))]
    while stack:
        node, children = stack[-1]
        for child in children:
            if child not in visited:
                visited.add(child)
                stack.append((child, iter(successors[child])))
                break
        else:
            stack.pop()
            postorder.append(node)
    postorder.reverse()
    return postorder


def _immediate_dominators(successors):
    order = _reverse_postorder(successors)
    position = {block: pos for pos, block in enumerate(order)}
    predecessors = {block: [] for block in order}
    for block in order:
        for succ in successors[block]:
            predecessors[succ].append(block)

    idom = {0: 0}

    def intersect(a, b):
        while a != b:
            while position[a] > position[b]:
                a = idom[a]
            while position[b] > position[a]:
                b = idom[b]
        return a

    changed = True
    while changed:
        changed = False
        for block in order[1:]:
            processed = [p for p in predecessors[block] if p in idom]
            if not processed:
                continue
            new_idom = processed[0]
            for pred in processed[1:]:
                new_idom = intersect(pred, new_idom)
            if idom.get(block) != new_idom:
                idom[block] = new_idom
                changed = True
    return idom


def _dominates(idom, dominator, block):
    while True:
        if block == dominator:
            return True
        parent = idom[block]
        if parent == block:
            return False
        block = parent


def build_block_graph(instructions):
    """Split resolved instructions into basic blocks and find back-edges."""
    instructions = list(instructions)
    count = len(instructions)
    if not count:
        return BlockGraph()

    leaders = {0}
    for position, instruction in enumerate(instructions):
        if _ends_block(instruction):
            if position + 1 < count:
                leaders.add(position + 1)
            if instruction.branch_target is not None:
                leaders.add(instruction.branch_target)

    starts = sorted(leaders)
    ends = starts[1:] + [count]
    block_at = {start: block for block, start in enumerate(starts)}

    successors = []
    terminators = []
    for block, (start, end) in enumerate(zip(starts, ends)):
        last = instructions[end - 1]
        has_next = end < count
        succ = []
        if _ends_block(last):
            terminators.append(end - 1)
            if last.branch_target is not None:
                succ.append(block_at[last.branch_target])
            if last.is_conditional() and has_next:
                succ.append(block + 1)
        else:
            terminators.append(None)
            if has_next:
                succ.append(block + 1)
        successors.append(tuple(dict.fromkeys(succ)))

    idom = _immediate_dominators(successors)

    blocks = []
    for block, (start, end) in enumerate(zip(starts, ends)):
        terminator = terminators[block]
        back_edge_target = None
        if terminator is not None and block in idom:
            target = instructions[terminator].branch_target
            if target is not None:
                target_block = block_at[target]
                if target_block in idom and _dominates(idom, target_block, block):
                    back_edge_target = target
        blocks.append(
            BasicBlock(
                start=start,
                end=end,
                successors=successors[block],
                terminator=terminator,
                back_edge_target=back_edge_target,
            )
        )
    return BlockGraph(tuple(blocks))


def build_cfg(assembly):
    """Resolve labels in parsed assembly and build its control flow graph.

    Raises ResolveError subclasses when label resolution fails.
    """
    resolved = assembly.resolve()
    return CfgResult(cfg=build_block_graph(resolved), resolved=resolved)